"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import os
import sys

# Raiz do projeto no sys.path independente de onde o pytest é iniciado
ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Testes nunca usam Redis nem proxies reais
os.environ.pop('REDIS_HOST', None)
os.environ.setdefault('USE_PROXY', 'false')
