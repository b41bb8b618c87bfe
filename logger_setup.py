# logger_setup.py

import logging
import os

LOGGER_NAME = "knn_sim"


def setup_logging(config: dict, log_root='runs'):
    """
    Sets up logging for the application.

    Uses the run configuration to create a run-specific log directory, and
    configures the dedicated "knn_sim" logger (not the root logger) to write to
    both the console and a log file. Verbose output from third-party libraries
    such as Numba and pygame stays out of the simulation log.

    Data Contract:
    - Inputs:
        - config (dict): The configuration returned by config.load_config.
        - log_root (str): Directory under which the per-run log folder is created.
    - Outputs: The configured logging.Logger.
    - Side Effects:
        - Configures the "knn_sim" logger.
        - Creates <log_root>/<run_id>/ for the log file.
    - Invariants: Calling it again replaces the handlers instead of duplicating them.
    """
    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

    log_dir = os.path.join(log_root, run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'simulation.log')

    formatter = logging.Formatter(log_config['format'])

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    # Clear existing handlers to avoid duplication if this function is called again
    if logger.hasHandlers():
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
