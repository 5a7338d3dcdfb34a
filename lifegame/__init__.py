"""Behavior-as-a-game rules engine.

Pure core (no IO):
  models       CharacterState, Stats, TimeContext, StatKey, TimeRange
  events       the seven engine events and their wire form
  quests       Quest, Consequence, Availability, QuestCard
  transitions  time tick, quest start, quest completion
  rules        filter -> rank -> select
  engine       facade over transitions + catalog + rules
  narrative    events -> one short summary

Around it:
  catalog      QuestCatalog protocol, quest file loading, bundled presets
  snapshot     persisted form of a player's state
  lint         quest authoring checks
  config       Settings from env / .env / JSON
  storage      JSON file storage
  session      load -> tick -> act -> summarize -> persist
  cli          the `lifegame` command

Re-exports the core API so `import lifegame` is enough for most callers.
"""

from .catalog import (  # noqa: F401
    CatalogError,
    InMemoryQuestCatalog,
    QuestCatalog,
    default_catalog,
    load_catalog,
)

from .engine import (  # noqa: F401
    complete_quest,
    get_available_quests,
    start_quest,
    tick,
)

from .events import EngineEvent, EventKind  # noqa: F401

from .models import (  # noqa: F401
    CharacterState,
    StatKey,
    Stats,
    TimeContext,
    TimeRange,
    new_character_state,
)

from .narrative import NarrativeSummary, NarrativeTone, summarize  # noqa: F401

from .quests import Quest, QuestType  # noqa: F401

from .rules import (  # noqa: F401
    choose_quests,
    filter_available_quests,
    is_quest_available,
    rank_quests,
    select_quest_choices,
)

from .snapshot import PlayerSnapshot, deserialize_state, serialize_state  # noqa: F401

from .transitions import (  # noqa: F401
    Transition,
    apply_quest_completed,
    apply_quest_started,
    apply_time_tick,
    compute_time_range,
)
