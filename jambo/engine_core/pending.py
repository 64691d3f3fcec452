"""
Pending Resolutions - Multi-step interactions awaiting a typed response.

Each kind is a frozen dataclass tagged with a PendingKind. The set of
kinds is closed; resolvers and candidate generators dispatch on `kind`.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from .cards import WareType


class PendingKind(str, Enum):
    OPPONENT_DISCARD = "OPPONENT_DISCARD"
    AUCTION = "AUCTION"
    DRAFT = "DRAFT"
    WARE_THEFT_SWAP = "WARE_THEFT_SWAP"
    WARE_THEFT_SINGLE = "WARE_THEFT_SINGLE"
    WARE_TRADE = "WARE_TRADE"
    BINARY_CHOICE = "BINARY_CHOICE"
    DECK_PEEK = "DECK_PEEK"
    WARE_CASH_CONVERSION = "WARE_CASH_CONVERSION"
    DISCARD_PICK = "DISCARD_PICK"
    WARE_SELECT_MULTIPLE = "WARE_SELECT_MULTIPLE"
    WARE_SELL_BULK = "WARE_SELL_BULK"
    DRAW_MODIFIER = "DRAW_MODIFIER"
    UTILITY_EFFECT = "UTILITY_EFFECT"
    HAND_SWAP = "HAND_SWAP"
    OPPONENT_CHOICE = "OPPONENT_CHOICE"
    SUPPLIES_DISCARD = "SUPPLIES_DISCARD"
    CARRIER_WARE_SELECT = "CARRIER_WARE_SELECT"
    UTILITY_KEEP = "UTILITY_KEEP"
    CROCODILE_USE = "CROCODILE_USE"
    UTILITY_REPLACE = "UTILITY_REPLACE"


class Step(str, Enum):
    """Sub-step of a multi-step resolution."""
    STEAL = "STEAL"
    GIVE = "GIVE"
    SELECT_GIVE = "SELECT_GIVE"
    SELECT_RECEIVE = "SELECT_RECEIVE"
    SELECT_CARD = "SELECT_CARD"
    SELECT_WARES = "SELECT_WARES"
    SELECT_WARE_TYPE = "SELECT_WARE_TYPE"
    TAKE = "TAKE"
    ACTIVE_CHOOSE = "ACTIVE_CHOOSE"
    OPPONENT_CHOOSE = "OPPONENT_CHOOSE"
    SELECT_UTILITY = "SELECT_UTILITY"


class DraftMode(str, Enum):
    WARES = "wares"
    CARDS = "cards"
    UTILITIES = "utilities"


@dataclass(frozen=True)
class OpponentDiscard:
    kind: ClassVar[PendingKind] = PendingKind.OPPONENT_DISCARD
    source_card: str
    target_player: int
    discard_to: int


@dataclass(frozen=True)
class Auction:
    kind: ClassVar[PendingKind] = PendingKind.AUCTION
    source_card: str
    wares: tuple[WareType, ...] = ()
    current_bid: int = 0
    current_bidder: int = 0
    next_bidder: int = 1
    is_bidding: bool = False


@dataclass(frozen=True)
class Draft:
    kind: ClassVar[PendingKind] = PendingKind.DRAFT
    source_card: str
    draft_mode: DraftMode
    current_picker: int
    available_wares: tuple[WareType, ...] = ()
    available_cards: tuple[str, ...] = ()


@dataclass(frozen=True)
class WareTheftSwap:
    kind: ClassVar[PendingKind] = PendingKind.WARE_THEFT_SWAP
    source_card: str
    step: Step = Step.STEAL


@dataclass(frozen=True)
class WareTheftSingle:
    kind: ClassVar[PendingKind] = PendingKind.WARE_THEFT_SINGLE
    source_card: str


@dataclass(frozen=True)
class WareTrade:
    kind: ClassVar[PendingKind] = PendingKind.WARE_TRADE
    source_card: str
    step: Step = Step.SELECT_GIVE
    give_type: WareType | None = None
    give_count: int = 0


@dataclass(frozen=True)
class BinaryChoice:
    kind: ClassVar[PendingKind] = PendingKind.BINARY_CHOICE
    source_card: str
    options: tuple[str, str]


@dataclass(frozen=True)
class DeckPeek:
    kind: ClassVar[PendingKind] = PendingKind.DECK_PEEK
    source_card: str
    revealed_cards: tuple[str, ...]
    pick_count: int = 1


@dataclass(frozen=True)
class WareCashConversion:
    kind: ClassVar[PendingKind] = PendingKind.WARE_CASH_CONVERSION
    source_card: str
    step: Step = Step.SELECT_CARD
    selected_card: str | None = None


@dataclass(frozen=True)
class DiscardPick:
    kind: ClassVar[PendingKind] = PendingKind.DISCARD_PICK
    source_card: str
    eligible_cards: tuple[str, ...]


@dataclass(frozen=True)
class WareSelectMultiple:
    kind: ClassVar[PendingKind] = PendingKind.WARE_SELECT_MULTIPLE
    source_card: str
    count: int = 2


@dataclass(frozen=True)
class WareSellBulk:
    kind: ClassVar[PendingKind] = PendingKind.WARE_SELL_BULK
    source_card: str
    price_per_ware: int = 2


@dataclass(frozen=True)
class DrawModifier:
    kind: ClassVar[PendingKind] = PendingKind.DRAW_MODIFIER
    source_card: str


@dataclass(frozen=True)
class UtilityEffect:
    kind: ClassVar[PendingKind] = PendingKind.UTILITY_EFFECT
    source_card: str
    utility_design: str
    step: Step = Step.SELECT_CARD
    selected_cards: tuple[str, ...] = ()


@dataclass(frozen=True)
class HandSwap:
    kind: ClassVar[PendingKind] = PendingKind.HAND_SWAP
    source_card: str
    step: Step = Step.TAKE
    revealed_hand: tuple[str, ...] = ()
    taken_card: str | None = None


@dataclass(frozen=True)
class OpponentChoice:
    kind: ClassVar[PendingKind] = PendingKind.OPPONENT_CHOICE
    source_card: str
    options: tuple[str, str]


@dataclass(frozen=True)
class SuppliesDiscard:
    kind: ClassVar[PendingKind] = PendingKind.SUPPLIES_DISCARD
    source_card: str


@dataclass(frozen=True)
class CarrierWareSelect:
    kind: ClassVar[PendingKind] = PendingKind.CARRIER_WARE_SELECT
    source_card: str
    target_player: int


@dataclass(frozen=True)
class UtilityKeep:
    kind: ClassVar[PendingKind] = PendingKind.UTILITY_KEEP
    source_card: str
    step: Step = Step.ACTIVE_CHOOSE


@dataclass(frozen=True)
class CrocodileUse:
    kind: ClassVar[PendingKind] = PendingKind.CROCODILE_USE
    source_card: str
    opponent_player: int
    step: Step = Step.SELECT_UTILITY


@dataclass(frozen=True)
class UtilityReplace:
    kind: ClassVar[PendingKind] = PendingKind.UTILITY_REPLACE
    source_card: str
    new_utility_design: str


PendingResolution = Union[
    OpponentDiscard,
    Auction,
    Draft,
    WareTheftSwap,
    WareTheftSingle,
    WareTrade,
    BinaryChoice,
    DeckPeek,
    WareCashConversion,
    DiscardPick,
    WareSelectMultiple,
    WareSellBulk,
    DrawModifier,
    UtilityEffect,
    HandSwap,
    OpponentChoice,
    SuppliesDiscard,
    CarrierWareSelect,
    UtilityKeep,
    CrocodileUse,
    UtilityReplace,
]
