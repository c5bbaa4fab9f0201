import logging

from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

from server import main

# Access logs carry full callback URLs (deposit addresses, tx ids); keep them out of the log files
for logger_name in ['uvicorn.access']:
    logging.getLogger(logger_name).setLevel(logging.WARNING)

if __name__ == '__main__':
    logging.info("🔧 [run.py] Starting checkout service")
    main()
