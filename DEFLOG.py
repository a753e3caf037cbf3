DEFLOG = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'fileHandler': {
            'level': 'INFO',
            'formatter': 'fileFormatter',
            'class': 'logging.FileHandler',
            'mode': 'w',
        },
        'consoleHandler': {
            'level': 'WARNING',
            'formatter': 'consoleFormatter',
            'class': 'logging.StreamHandler',
            'stream': 'ext://sys.stderr',
        },
    },
    'formatters': {
        'fileFormatter': {
            'format': '%(asctime)s - %(levelname)s - %(module)s - %(funcName)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
            'class': 'logging.Formatter'
        },
        'consoleFormatter': {
            'format': '%(levelname)s: %(message)s',
            'class': 'logging.Formatter'
        },
    },
    'loggers': {
        '': {
            'handlers': ['fileHandler', 'consoleHandler'],
            'level': 'INFO',
        },
    }
}
