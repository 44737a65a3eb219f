# Models package — import all models here so Alembic can discover them.

from taskboard.models.user import User  # noqa: F401
from taskboard.models.board import Board, board_members  # noqa: F401
from taskboard.models.kanban import (  # noqa: F401
    KanbanCard,
    KanbanColumn,
    Label,
    card_assignees,
    card_labels,
)
from taskboard.models.comment import Comment  # noqa: F401
from taskboard.models.message import ChatReadStatus, Message  # noqa: F401
from taskboard.models.join_request import JoinRequest  # noqa: F401
from taskboard.models.notification import Notification  # noqa: F401
from taskboard.models.activity import Activity  # noqa: F401
