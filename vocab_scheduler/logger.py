import sys
import logging
from pythonjsonlogger import jsonlogger

from vocab_scheduler.config import settings


def get_logger(name: str = 'vocab_scheduler'):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level.upper())

    ch = logging.StreamHandler(sys.stderr)
    if settings.log_format == 'json':
        fmt = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    else:
        fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    logger.propagate = False

    return logger


def log_record_created(user_id: int, item_id: int, track: str, next_review: str, via: str):
    logger = get_logger()
    logger.info('record_created', extra={'user_id': user_id, 'item_id': item_id, 'track': track, 'next_review': next_review, 'via': via})


def log_review_submitted(user_id: int, item_id: int, track: str, outcome: int, interval_days: int, repetitions: int, ease_factor: float):
    logger = get_logger()
    logger.info('review_submitted', extra={
        'user_id': user_id,
        'item_id': item_id,
        'track': track,
        'outcome': outcome,
        'interval_days': interval_days,
        'repetitions': repetitions,
        'ease_factor': round(ease_factor, 4),
    })


def log_record_mastered(user_id: int, item_id: int, track: str, repetitions: int):
    logger = get_logger()
    logger.info('record_mastered', extra={'user_id': user_id, 'item_id': item_id, 'track': track, 'repetitions': repetitions})


def log_record_removed(user_id: int, item_id: int, track: str):
    logger = get_logger()
    logger.info('record_removed', extra={'user_id': user_id, 'item_id': item_id, 'track': track})
