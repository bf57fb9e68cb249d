from icfs import icfslog

logger = icfslog.getLogger("config")
