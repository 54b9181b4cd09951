"""
Граница с Discord: константы взаимодействий, ответы и REST-клиент.
"""
