import logging
def get_logger(name:str="cachesim", level:str="INFO"):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    logging.getLogger("cachesim").setLevel(level.upper())
    return logging.getLogger(name)
