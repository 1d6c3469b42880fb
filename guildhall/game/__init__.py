"""Пакет игровых сервисов.

Объединяет загрузчик данных, каталоги записей и правила контрактов.
"""
from .catalog import RecordStore
from .repository import DataStore
from .services import GameService

__all__ = ["DataStore", "GameService", "RecordStore"]
