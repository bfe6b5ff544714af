"""Request handling — orchestration, list-view projection and response envelopes."""
