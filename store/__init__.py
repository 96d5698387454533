"""
数据库存储模块入口。
"""

from .database import init_db
from .history_repo import HistoryRepo, history_repo
from .models import IsochroneRecord

__all__ = [
    "HistoryRepo",
    "IsochroneRecord",
    "history_repo",
    "init_db",
]
