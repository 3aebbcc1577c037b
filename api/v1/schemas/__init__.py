"""Re-export individual schema modules for easy imports."""

from .user import UserCreate, UserOut, UserToken, UserUpdate
from .prefs import PreferenceIn, PreferenceOut
from .biometric import BiometricIn, BiometricOut
from .goal import GoalIn, GoalOut, GoalUpdate
from .target import DailyTargetOut, ProposalOut, ProposeRequest
from .meal import MealIn, MealOut, MealUpdate, MovedOut, ProgressOut
from .chat import ChatMessageIn, ChatMessageOut
from .library import (
    BrandIn,
    BrandOut,
    MenuItemIn,
    MenuItemOut,
    MenuItemUpdate,
    QuickLogIn,
    SavedItemIn,
    SavedItemOut,
    SavedItemUpdate,
    ScheduleIn,
    ScheduleOut,
    ScheduleUpdate,
)

__all__ = [
    "UserCreate",
    "UserOut",
    "UserToken",
    "UserUpdate",
    "PreferenceIn",
    "PreferenceOut",
    "BiometricIn",
    "BiometricOut",
    "GoalIn",
    "GoalOut",
    "GoalUpdate",
    "DailyTargetOut",
    "ProposalOut",
    "ProposeRequest",
    "MealIn",
    "MealOut",
    "MealUpdate",
    "MovedOut",
    "ProgressOut",
    "ChatMessageIn",
    "ChatMessageOut",
    "BrandIn",
    "BrandOut",
    "MenuItemIn",
    "MenuItemOut",
    "MenuItemUpdate",
    "QuickLogIn",
    "SavedItemIn",
    "SavedItemOut",
    "SavedItemUpdate",
    "ScheduleIn",
    "ScheduleOut",
    "ScheduleUpdate",
]
