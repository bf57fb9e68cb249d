mounted = False
