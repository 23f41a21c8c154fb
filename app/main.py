"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import argparse
import logging
import os
import sys
import time

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from app.config import Config
from app.bootstrap import Bootstrap
from exceptions import ConfigurationError
from utils.logging.logger import setup_logging

setup_logging(Config.LOG_LEVEL, Config.LOG_FORMAT)

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Sincroniza episódios do Toonstream com o Supabase')
    parser.add_argument('--once', action='store_true', help='executa um único ciclo e sai')
    parser.add_argument('--force', action='store_true', help='ignora a detecção de mudanças')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        orchestrator = Bootstrap.create_orchestrator()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    while True:
        try:
            stats = orchestrator.run(force=args.force)
            if args.once:
                return 0 if not stats.failed_episodes else 2
        except Exception as e:
            # Falha de ciclo não derruba o processo; tenta no próximo
            error_msg = str(e).split('\n')[0][:100] if str(e) else ''
            logger.error(f"Ciclo de sincronização falhou: {type(e).__name__} - {error_msg}")
            if args.once:
                return 1

        logger.info(f"Próximo ciclo em {Config.POLL_INTERVAL}s")
        time.sleep(Config.POLL_INTERVAL)


if __name__ == '__main__':
    sys.exit(main())
