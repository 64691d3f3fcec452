"""
Card Database - Static, read-only card definitions for Jambo.

The deck holds 110 physical cards. Each physical card id is
``<design_id>_<n>`` where n runs from 1 to the design's copy count.

Design principles:
- Design ids for people, animals and utilities are closed enums
- Ware cards carry a WareSpec (types, buy price, sell price)
- Lookups never allocate: every id is indexed at import time
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class WareType(str, Enum):
    """The six tradable goods."""
    TRINKETS = "trinkets"
    HIDES = "hides"
    TEA = "tea"
    SILK = "silk"
    FRUIT = "fruit"
    SALT = "salt"


WARE_TYPES: tuple[WareType, ...] = tuple(WareType)


class CardType(str, Enum):
    WARE = "ware"
    PEOPLE = "people"
    ANIMAL = "animal"
    UTILITY = "utility"
    STAND = "stand"


class UtilityDesign(str, Enum):
    WELL = "well"
    DRUMS = "drums"
    THRONE = "throne"
    BOAT = "boat"
    SCALE = "scale"
    MASK_OF_TRANSFORMATION = "mask_of_transformation"
    SUPPLIES = "supplies"
    KETTLE = "kettle"
    LEOPARD_STATUE = "leopard_statue"
    WEAPONS = "weapons"


class AnimalDesign(str, Enum):
    CROCODILE = "crocodile"
    PARROT = "parrot"
    HYENA = "hyena"
    SNAKE = "snake"
    ELEPHANT = "elephant"
    APE = "ape"
    LION = "lion"
    CHEETAH = "cheetah"


class PeopleDesign(str, Enum):
    GUARD = "guard"
    RAIN_MAKER = "rain_maker"
    SHAMAN = "shaman"
    PSYCHIC = "psychic"
    TRIBAL_ELDER = "tribal_elder"
    WISE_MAN = "wise_man"
    PORTUGUESE = "portuguese"
    BASKET_MAKER = "basket_maker"
    TRAVELING_MERCHANT = "traveling_merchant"
    ARABIAN_MERCHANT = "arabian_merchant"
    DANCER = "dancer"
    CARRIER = "carrier"
    DRUMMER = "drummer"


class InteractionType(str, Enum):
    """How playing or activating a card interacts with the game."""
    NONE = "none"
    REACTION = "reaction"
    TURN_MODIFIER = "turn_modifier"
    ACTIVE_SELECT = "active_select"
    OPPONENT_SELECT = "opponent_select"
    DRAFT = "draft"
    AUCTION = "auction"
    WARE_TRADE = "ware_trade"
    DECK_PEEK = "deck_peek"
    WARE_SELL_BULK = "ware_sell_bulk"
    WARE_SELECT_MULTIPLE = "ware_select_multiple"
    WARE_CASH_CONVERSION = "ware_cash_conversion"
    BINARY_CHOICE = "binary_choice"
    DISCARD_PICK = "discard_pick"
    WARE_RETURN = "ware_return"
    DRAW_MODIFIER = "draw_modifier"


@dataclass(frozen=True)
class WareSpec:
    """Wares printed on a ware card."""
    types: tuple[WareType, ...]
    buy_price: int
    sell_price: int

    @property
    def margin(self) -> int:
        return self.sell_price - self.buy_price


@dataclass(frozen=True)
class CardDef:
    """
    Definition of a card design.

    design_id is the design enum member for people, animals and
    utilities, and a plain string for ware cards and the stand.
    """
    design_id: str
    name: str
    card_type: CardType
    copies: int
    interaction: InteractionType = InteractionType.NONE
    wares: WareSpec | None = None


_K, _H, _T, _L, _F, _S = WARE_TYPES


def _ware(design_id: str, name: str, types: tuple[WareType, ...], buy: int, sell: int, copies: int = 2) -> CardDef:
    return CardDef(
        design_id=design_id,
        name=name,
        card_type=CardType.WARE,
        copies=copies,
        wares=WareSpec(types=types, buy_price=buy, sell_price=sell),
    )


# ============================================================================
# Designs
# ============================================================================

WARE_DESIGNS: tuple[CardDef, ...] = (
    _ware("ware_6all", "Grand Market", WARE_TYPES, 10, 18, copies=4),
    _ware("ware_3k", "Trinket Stall", (_K, _K, _K), 3, 10),
    _ware("ware_3h", "Hide Stall", (_H, _H, _H), 3, 10),
    _ware("ware_3t", "Tea Stall", (_T, _T, _T), 3, 10),
    _ware("ware_3l", "Silk Stall", (_L, _L, _L), 3, 10),
    _ware("ware_3f", "Fruit Stall", (_F, _F, _F), 3, 10),
    _ware("ware_3s", "Salt Stall", (_S, _S, _S), 3, 10),
    _ware("ware_2k1f", "Trinkets & Fruit", (_K, _K, _F), 4, 11),
    _ware("ware_2l1s", "Silk & Salt", (_L, _L, _S), 4, 11),
    _ware("ware_2t1l", "Tea & Silk", (_T, _T, _L), 4, 11),
    _ware("ware_2s1k", "Salt & Trinkets", (_S, _S, _K), 4, 11),
    _ware("ware_2f1h", "Fruit & Hides", (_F, _F, _H), 4, 11),
    _ware("ware_2h1t", "Hides & Tea", (_H, _H, _T), 4, 11),
    _ware("ware_slk", "Salt, Silk & Trinkets", (_S, _L, _K), 5, 12),
    _ware("ware_khl", "Trinkets, Hides & Silk", (_K, _H, _L), 5, 12),
    _ware("ware_skf", "Salt, Trinkets & Fruit", (_S, _K, _F), 5, 12),
    _ware("ware_fht", "Fruit, Hides & Tea", (_F, _H, _T), 5, 12),
    _ware("ware_tsf", "Tea, Salt & Fruit", (_T, _S, _F), 5, 12),
    _ware("ware_lht", "Silk, Hides & Tea", (_L, _H, _T), 5, 12),
)

STAND_DESIGN = CardDef(
    design_id="small_market_stand",
    name="Small Market Stand",
    card_type=CardType.STAND,
    copies=5,
)

PEOPLE_DESIGNS: tuple[CardDef, ...] = (
    CardDef(PeopleDesign.GUARD, "Guard", CardType.PEOPLE, 6, InteractionType.REACTION),
    CardDef(PeopleDesign.RAIN_MAKER, "Rain Maker", CardType.PEOPLE, 3, InteractionType.REACTION),
    CardDef(PeopleDesign.SHAMAN, "Shaman", CardType.PEOPLE, 2, InteractionType.WARE_TRADE),
    CardDef(PeopleDesign.PSYCHIC, "Psychic", CardType.PEOPLE, 2, InteractionType.DECK_PEEK),
    CardDef(PeopleDesign.TRIBAL_ELDER, "Tribal Elder", CardType.PEOPLE, 2, InteractionType.OPPONENT_SELECT),
    CardDef(PeopleDesign.WISE_MAN, "Wise Man from Afar", CardType.PEOPLE, 2, InteractionType.TURN_MODIFIER),
    CardDef(PeopleDesign.PORTUGUESE, "Portuguese", CardType.PEOPLE, 2, InteractionType.WARE_SELL_BULK),
    CardDef(PeopleDesign.BASKET_MAKER, "Basket Maker", CardType.PEOPLE, 2, InteractionType.WARE_SELECT_MULTIPLE),
    CardDef(PeopleDesign.TRAVELING_MERCHANT, "Traveling Merchant", CardType.PEOPLE, 2, InteractionType.AUCTION),
    CardDef(PeopleDesign.ARABIAN_MERCHANT, "Arabian Merchant", CardType.PEOPLE, 2, InteractionType.AUCTION),
    CardDef(PeopleDesign.DANCER, "Dancer", CardType.PEOPLE, 2, InteractionType.WARE_CASH_CONVERSION),
    CardDef(PeopleDesign.CARRIER, "Carrier", CardType.PEOPLE, 1, InteractionType.BINARY_CHOICE),
    CardDef(PeopleDesign.DRUMMER, "Drummer", CardType.PEOPLE, 1, InteractionType.DISCARD_PICK),
)

ANIMAL_DESIGNS: tuple[CardDef, ...] = (
    CardDef(AnimalDesign.CROCODILE, "Crocodile", CardType.ANIMAL, 5, InteractionType.ACTIVE_SELECT),
    CardDef(AnimalDesign.PARROT, "Parrot", CardType.ANIMAL, 2, InteractionType.ACTIVE_SELECT),
    CardDef(AnimalDesign.HYENA, "Hyena", CardType.ANIMAL, 2, InteractionType.ACTIVE_SELECT),
    CardDef(AnimalDesign.SNAKE, "Snake", CardType.ANIMAL, 1, InteractionType.OPPONENT_SELECT),
    CardDef(AnimalDesign.ELEPHANT, "Elephant", CardType.ANIMAL, 1, InteractionType.DRAFT),
    CardDef(AnimalDesign.APE, "Ape", CardType.ANIMAL, 1, InteractionType.DRAFT),
    CardDef(AnimalDesign.LION, "Lion", CardType.ANIMAL, 1, InteractionType.DRAFT),
    CardDef(AnimalDesign.CHEETAH, "Cheetah", CardType.ANIMAL, 1, InteractionType.OPPONENT_SELECT),
)

UTILITY_DESIGNS: tuple[CardDef, ...] = (
    CardDef(UtilityDesign.WELL, "Well", CardType.UTILITY, 3, InteractionType.NONE),
    CardDef(UtilityDesign.DRUMS, "Drums", CardType.UTILITY, 3, InteractionType.WARE_RETURN),
    CardDef(UtilityDesign.THRONE, "Throne", CardType.UTILITY, 2, InteractionType.ACTIVE_SELECT),
    CardDef(UtilityDesign.BOAT, "Boat", CardType.UTILITY, 2, InteractionType.ACTIVE_SELECT),
    CardDef(UtilityDesign.SCALE, "Scale", CardType.UTILITY, 2, InteractionType.ACTIVE_SELECT),
    CardDef(UtilityDesign.MASK_OF_TRANSFORMATION, "Mask of Transformation", CardType.UTILITY, 2, InteractionType.DRAW_MODIFIER),
    CardDef(UtilityDesign.SUPPLIES, "Supplies", CardType.UTILITY, 2, InteractionType.BINARY_CHOICE),
    CardDef(UtilityDesign.KETTLE, "Kettle", CardType.UTILITY, 2, InteractionType.ACTIVE_SELECT),
    CardDef(UtilityDesign.LEOPARD_STATUE, "Leopard Statue", CardType.UTILITY, 2, InteractionType.ACTIVE_SELECT),
    CardDef(UtilityDesign.WEAPONS, "Weapons", CardType.UTILITY, 2, InteractionType.ACTIVE_SELECT),
)

ALL_DESIGNS: tuple[CardDef, ...] = (
    WARE_DESIGNS + (STAND_DESIGN,) + PEOPLE_DESIGNS + ANIMAL_DESIGNS + UTILITY_DESIGNS
)


def _key(design: CardDef) -> str:
    return design.design_id.value if isinstance(design.design_id, Enum) else design.design_id


DESIGNS_BY_ID: dict[str, CardDef] = {_key(d): d for d in ALL_DESIGNS}


def _build_card_ids() -> tuple[str, ...]:
    ids = []
    for design in ALL_DESIGNS:
        key = _key(design)
        for n in range(1, design.copies + 1):
            ids.append(f"{key}_{n}")
    return tuple(ids)


ALL_CARD_IDS: tuple[str, ...] = _build_card_ids()

_CARDS_BY_ID: dict[str, CardDef] = {
    card_id: DESIGNS_BY_ID[card_id.rsplit("_", 1)[0]] for card_id in ALL_CARD_IDS
}


def get_card(card_id: str) -> CardDef:
    """Look up the definition of a physical card id. Raises KeyError if unknown."""
    return _CARDS_BY_ID[card_id]


def design_of(card_id: str) -> str:
    """Design id of a physical card (string form)."""
    return card_id.rsplit("_", 1)[0]
