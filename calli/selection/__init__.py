from calli.selection.schedule_draft import ScheduleDraft
from calli.selection.state_machine import (
    Modal,
    ModalTrigger,
    SelectionSnapshot,
    SelectionStateMachine,
)

__all__ = [
    "SelectionStateMachine",
    "SelectionSnapshot",
    "Modal",
    "ModalTrigger",
    "ScheduleDraft",
]
