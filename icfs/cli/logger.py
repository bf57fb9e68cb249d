from icfs import icfslog

logger = icfslog.getLogger("cli")
