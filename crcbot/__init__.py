"""
Обработчик взаимодействий Discord для бота Code Red Creations:
информационные сообщения и розыгрыши.
"""

__version__ = "1.0.0"
