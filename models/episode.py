"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

CLASSIFICATION_UNKNOWN = 'unknown'
CLASSIFICATION_TERMINAL = 'terminal-video'
CLASSIFICATION_REDIRECTOR = 'intermediate-redirector'
CLASSIFICATION_REJECTED = 'rejected'


# Código <temporada>x<episódio> (ambos positivos)
@dataclass(frozen=True)
class EpisodeCode:
    season: int
    episode: int

    def __post_init__(self):
        if self.season <= 0 or self.episode <= 0:
            raise ValueError(f"Código de episódio inválido: {self.season}x{self.episode}")

    @property
    def key(self) -> str:
        return f"{self.season}x{self.episode}"

    def __str__(self) -> str:
        return f"S{self.season}E{self.episode}"


# Card de episódio extraído de uma página de listagem
@dataclass
class EpisodeCard:
    url: str
    title: str = ''
    thumbnail_url: Optional[str] = None


# Link de episódio extraído da página da série ou da API de temporadas
@dataclass
class SeriesEpisodeLink:
    url: str
    code: EpisodeCode
    title: str = ''
    thumbnail_url: Optional[str] = None

    @property
    def season(self) -> int:
        return self.code.season

    @property
    def episode(self) -> int:
        return self.code.episode


# Opção de servidor encontrada na página do episódio
@dataclass
class ServerOption:
    name: str
    option: int
    intermediate_url: Optional[str] = None
    direct_url: Optional[str] = None


# Candidato avaliado durante uma única resolução de embed
@dataclass
class EmbedCandidate:
    url: str
    depth: int
    classification: str = CLASSIFICATION_UNKNOWN


# Servidor resolvido para URL final
@dataclass
class ResolvedServer:
    display_name: str
    final_url: str
    ordinal: int
    intermediate_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'name': self.display_name,
            'url': self.final_url,
            'real_video': self.final_url,
            'type': 'iframe',
            'option': self.ordinal,
        }
        if self.intermediate_url:
            result['intermediate_url'] = self.intermediate_url
        return result


# Registro completo de episódio (chave única: series_slug + season + episode)
@dataclass
class EpisodeRecord:
    series_slug: str
    season: int
    episode: int
    title: str
    thumbnail: Optional[str] = None
    poster: Optional[str] = None
    card_thumbnail: Optional[str] = None
    list_thumbnail: Optional[str] = None
    player_thumbnail: Optional[str] = None
    servers: List[ResolvedServer] = field(default_factory=list)

    def to_row(self) -> Dict[str, Any]:
        """Converte para a linha da tabela episodes"""
        return {
            'series_slug': self.series_slug,
            'season': self.season,
            'episode': self.episode,
            'title': self.title,
            'thumbnail': self.thumbnail,
            'episode_main_poster': self.poster,
            'episode_card_thumbnail': self.card_thumbnail,
            'episode_list_thumbnail': self.list_thumbnail,
            'video_player_thumbnail': self.player_thumbnail,
            'servers': [server.to_dict() for server in self.servers],
        }

    def to_latest_row(self, series_title: str, added_at: str) -> Dict[str, Any]:
        """Converte para a linha do feed latest_episodes"""
        return {
            'series_slug': self.series_slug,
            'series_title': series_title,
            'season': self.season,
            'episode': self.episode,
            'episode_title': self.title,
            'thumbnail': self.card_thumbnail or self.list_thumbnail or self.thumbnail,
            'added_at': added_at,
        }


# Resultado da verificação de mudanças de um episódio persistido
@dataclass
class UpdateCheck:
    exists: bool
    needs_update: bool
    missing_servers: bool = False
    missing_thumbnail: bool = False
    missing_poster: bool = False

    def missing_fields(self) -> List[str]:
        missing = []
        if self.missing_servers:
            missing.append('servers')
        if self.missing_thumbnail:
            missing.append('thumbnail')
        if self.missing_poster:
            missing.append('poster')
        return missing
