"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from models.episode import EpisodeCard, EpisodeCode
from models.series import SeriesRecord

OUTCOME_NEW = 'new'
OUTCOME_UPDATED = 'updated'
OUTCOME_UNCHANGED = 'unchanged'
OUTCOME_DUPLICATE = 'duplicate'
OUTCOME_SKIPPED = 'skipped'
OUTCOME_FAILED = 'failed'

REASON_HOMEPAGE = 'homepage'
REASON_SMART_NEW = 'smart-new'
REASON_BACKFILL = 'backfill'
REASON_LATEST_AUDIT = 'latest-audit'
REASON_MISSING_DATA = 'update-missing-data'


# Contadores de uma execução
@dataclass
class RunStats:
    new_episodes: int = 0
    updated_episodes: int = 0
    failed_episodes: int = 0
    skipped_episodes: int = 0
    total_servers: int = 0
    series_processed: Set[str] = field(default_factory=set)

    @property
    def synced_episodes(self) -> int:
        return self.new_episodes + self.updated_episodes

    @property
    def total_processed(self) -> int:
        return self.synced_episodes + self.failed_episodes + self.skipped_episodes

    @property
    def success_rate(self) -> float:
        # Percentual com uma casa decimal
        if not self.total_processed:
            return 0.0
        return round(self.synced_episodes / self.total_processed * 100, 1)

    def summary_lines(self) -> List[str]:
        lines = [
            "=" * 60,
            "RESUMO DA SINCRONIZAÇÃO",
            "=" * 60,
            f"Episódios novos: {self.new_episodes}",
            f"Episódios atualizados: {self.updated_episodes}",
            f"Servidores obtidos: {self.total_servers}",
            f"Séries processadas: {len(self.series_processed)}",
        ]
        if self.failed_episodes:
            lines.append(f"Episódios com falha: {self.failed_episodes}")
        if self.skipped_episodes:
            lines.append(f"Ignorados (inválidos/removidos): {self.skipped_episodes}")
        lines.append(f"Total processado: {self.total_processed} - taxa de sucesso: {self.success_rate}%")
        if self.failed_episodes:
            lines.append("Status: concluído com falhas")
        else:
            lines.append("Status: concluído com sucesso")
        lines.append("=" * 60)
        return lines


# Dicas do chamador para sincronizar um episódio
@dataclass
class SyncHints:
    series_url: Optional[str] = None
    series_title: Optional[str] = None
    card: Optional[EpisodeCard] = None
    code: Optional[EpisodeCode] = None
    reason: str = REASON_HOMEPAGE
    # Falha ao buscar a página conta como ignorado (episódio removido), não como falha
    tolerate_missing: bool = False


# Resultado da sincronização de um episódio
@dataclass
class SyncOutcome:
    status: str
    series_slug: Optional[str] = None
    code: Optional[EpisodeCode] = None
    servers: int = 0

    @property
    def persisted(self) -> bool:
        return self.status in (OUTCOME_NEW, OUTCOME_UPDATED)


# Estado de uma execução (cache de séries, dedupe e estatísticas)
@dataclass
class RunContext:
    force: bool = False
    stats: RunStats = field(default_factory=RunStats)
    series_cache: Dict[str, SeriesRecord] = field(default_factory=dict)
    processed: Set[Tuple[str, int, int]] = field(default_factory=set)

    def was_processed(self, series_slug: str, code: EpisodeCode) -> bool:
        return (series_slug, code.season, code.episode) in self.processed

    def mark_processed(self, series_slug: str, code: EpisodeCode) -> None:
        self.processed.add((series_slug, code.season, code.episode))
