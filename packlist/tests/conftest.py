"""
Shared fixtures for the packlist tests.

Reference tables come from in-memory CSV text, the completion service is a
MagicMock, and a fake clock drives cache expiry. No network access.
"""

import json
from typing import Any, List
from unittest.mock import MagicMock

import pytest

from packlist.shared.config import EngineConfig
from packlist.tables.cache import TableCache
from packlist.tables.loader import TableLoadError, parse_csv


SEASONS_CSV = """country,region,type,label,level,note,start_month,end_month,advice_flags,item_tags
Vietnam,,climate,wet,,,May,Oct,"rain,mosquito","humidity,rain"
Vietnam,,climate,dry,,,Nov,Apr,sun,
Vietnam,,risk,Typhoon,High,Central coast storms,Sep,Nov,rain,
Indonesia,,climate,dry,,,Apr,Oct,sun,
Indonesia,,risk,Dengue,,Higher in rainy months,Nov,Mar,mosquito,
Thailand,Chiang Mai,climate,cool,,,Nov,Feb,,layers
Thailand,,climate,hot,,,Mar,May,sun,
Iceland,,climate,winter,,,Nov,Feb,,"layers,thermal"
"""

PRODUCTS_CSV = """category,name,weight_grams,activities,seasons,url,qty_short,qty_medium,qty_long,brand
Gear,Headlamp,80,,all,https://shop.example/headlamp,,,,Petzl
Gear,Dry bag,120,alle,all,https://shop.example/drybag,,,,
Gear,Surf wax,60,surfen,all,https://shop.example/wax,,,,
Gear,Dive mask,"190,5",diving;snorkeling,all,https://shop.example/mask,,,,
Gear,Trekking poles,450,hiking,all,https://shop.example/poles,,,,
Clothing,T-shirt,150,,all,https://shop.example/tshirt,3,5,7,
Clothing,Socks,40,generic,all,https://shop.example/socks,,6,,
Gear,Ski goggles,200,ski,winter,https://shop.example/goggles,,,,
"""


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticSource:
    """Table source serving fixed CSV text and counting loads."""

    def __init__(self, text: str = "", location: str = "memory://table", error: str = None):
        self.text = text
        self.location = location
        self.error = error
        self.loads = 0

    def load(self):
        self.loads += 1
        if self.error:
            raise TableLoadError(self.error)
        return parse_csv(self.text)


def make_completion(content: str) -> MagicMock:
    """Chat completion response carrying ``content``."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


def make_empty_reply_client(message_missing: bool = False) -> MagicMock:
    """Fake OpenAI client whose replies carry no choices (or a choice without a message)."""
    response = MagicMock()
    if message_missing:
        response.choices = [MagicMock(message=None)]
    else:
        response.choices = []
    client = MagicMock()
    client.chat.completions.create.return_value = response
    return client


def make_llm_client(*replies: Any) -> MagicMock:
    """
    Fake OpenAI client returning the given replies in order.

    Dict replies are JSON-encoded; exceptions are raised.
    """
    client = MagicMock()
    side_effects: List[Any] = []
    for reply in replies:
        if isinstance(reply, Exception):
            side_effects.append(reply)
        elif isinstance(reply, str):
            side_effects.append(make_completion(reply))
        else:
            side_effects.append(make_completion(json.dumps(reply)))
    client.chat.completions.create.side_effect = side_effects
    return client


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    """Configuration without completion service or remote tables."""
    return EngineConfig(openai_api_key=None, products_csv_url="memory://products")


@pytest.fixture
def season_cache(clock):
    return TableCache(StaticSource(SEASONS_CSV, "memory://seasons"), 3600, "seasons", clock)


@pytest.fixture
def product_cache(clock):
    return TableCache(StaticSource(PRODUCTS_CSV, "memory://products"), 600, "products", clock)
