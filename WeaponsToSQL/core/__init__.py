from .normalizer import WeaponsNormalizer
from .analyzer import WeaponDocumentAnalyzer
from .table_builder import TableBuilder, NormalizedTables, INSERT_ORDER

__all__ = [
    'WeaponsNormalizer',
    'WeaponDocumentAnalyzer',
    'TableBuilder',
    'NormalizedTables',
    'INSERT_ORDER',
]
