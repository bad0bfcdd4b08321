"""Chronicle Weaver: turn-based narrative sessions driven by a content provider.

Module layout (leaves first):
  stats         stat budget normaliser
  models        pydantic records (Character, Scene, HistoryEntry, ...)
  history       append-only history log
  prompts       prompt text, response schemas, scene request assembly
  provider      ContentProvider protocol, GeminiProvider, EchoProvider
  orchestrator  one turn: scene text, then illustration with fallback
  characters    character builder steps
  state         SessionState aggregate
  storage       key-value stores and the save-slot gateway
  session       the session state machine
  config        environment settings
  api           FastAPI surface
"""
