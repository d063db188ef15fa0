"""
Collaborator interfaces injected into the pipeline.

The bot wires the real implementations (gspread reader, aiohttp relay);
tests pass in-memory fakes with the same methods.
"""

from typing import Dict, List, Optional, Protocol, Tuple

from models.entities import Team, WeekBlock


class ScheduleStore(Protocol):
    """Read side of the schedule spreadsheet"""

    def get_teams(self) -> List[Team]: ...

    def get_aliases(self) -> List[Tuple[str, str]]: ...

    def get_maps(self) -> List[str]: ...

    def get_week_blocks(self, division: str) -> List[WeekBlock]: ...


class ChatRelay(Protocol):
    """Message primitives of the chat relay"""

    async def post_message(self, channel_id, content: str, embeds: Optional[list] = None) -> str: ...

    async def edit_message(self, channel_id, message_id, content: str,
                           embeds: Optional[list] = None) -> str: ...

    async def delete_message(self, channel_id, message_id) -> bool: ...

    async def fetch_messages(self, channel_id, after=None, around=None,
                             limit: int = 50) -> List[Dict]: ...

    async def fetch_message(self, channel_id, message_id) -> Optional[Dict]: ...
