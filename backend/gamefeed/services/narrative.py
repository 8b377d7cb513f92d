"""Narrative text for player updates.

The narrator is an external, fallible collaborator. Callers must be ready
for ``CollaboratorUnavailable`` and substitute :func:`fallback_narrative`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from gamefeed.errors import CollaboratorUnavailable
from gamefeed.models import Decision, Player

EVENT_DESCRIPTIONS = {
    'touchdown': 'just scored a touchdown',
    'field_goal': 'kicked a field goal',
    'interception': 'threw an interception',
    'fumble': 'lost a fumble',
    'big_play': 'made a big play',
    'target': 'was targeted',
    'carry': 'had a rushing attempt',
    'sack': 'recorded a sack',
    'defensive_td': 'scored a defensive touchdown',
}


def fallback_narrative(player: Player, stats: Dict[str, Any]) -> str:
    return (
        f"{player.name} ({player.role}) has {float(stats['score']):.1f} fantasy points in Q{stats['quarter']}. "
        f"{stats['status']} and contributing to your lineup."
    )


def build_prompt(player: Player, stats: Dict[str, Any], event: Optional[Decision]) -> str:
    event_context = ''
    if event is not None:
        what = EVENT_DESCRIPTIONS.get(event.definition.kind, f'had a {event.definition.description}')
        event_context = f"{player.name} {what} in Q{stats['quarter']}. "
    if stats['inProgress']:
        game_context = f"Currently Q{stats['quarter']}, {stats['timeRemainingLabel']} remaining. "
    else:
        game_context = 'Game completed. '
    return (
        f"{event_context}{game_context}Write a 1-2 sentence fantasy update for "
        f"{player.name} ({player.role}, {player.team}). Current fantasy points: "
        f"{float(stats['score']):.1f}. Make it exciting for fantasy owners."
    )


class Narrator(ABC):
    """Interface for narrative generators."""

    @abstractmethod
    def generate(self, player: Player, stats: Dict[str, Any], event: Optional[Decision]) -> str:
        raise NotImplementedError


class OpenAINarrator(Narrator):
    """OpenAI chat completions over plain HTTP."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = 'https://api.openai.com/v1',
        model: str = 'gpt-3.5-turbo',
        timeout: int = 8,
        max_tokens: int = 60,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.session = session or requests.Session()

    def generate(self, player: Player, stats: Dict[str, Any], event: Optional[Decision]) -> str:
        if not self.api_key:
            raise CollaboratorUnavailable('OPENAI_API_KEY not configured')

        payload = {
            'model': self.model,
            'max_tokens': int(self.max_tokens),
            'messages': [{'role': 'user', 'content': build_prompt(player, stats, event)}],
        }
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }
        try:
            r = self.session.post(
                f'{self.base_url}/chat/completions',
                json=payload,
                headers=headers,
                timeout=(3, max(4, int(self.timeout))),
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise CollaboratorUnavailable(f'narrative request failed: {exc}') from exc

        try:
            out = (data['choices'][0]['message']['content'] or '').strip()
        except (KeyError, IndexError, TypeError) as exc:
            raise CollaboratorUnavailable(f'unexpected narrative response: {exc!r}') from exc
        if not out:
            raise CollaboratorUnavailable('empty narrative response')
        return out
