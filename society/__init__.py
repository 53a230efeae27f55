"""
SOCIETY — Launch & Session Resolution Core
===========================================
Decides, on every app launch and on every session change, which screen
the SOCIETY client should be showing: splash, login, onboarding, the main
app, or one of the account-problem states.  All real state lives in
Supabase; this package only reads it.

Package layout::

    society/
    ├── config.py          # YAML → typed config (launch timings)
    ├── constants.py       # Table names and user-facing strings
    ├── launch/
    │   ├── state.py       # LaunchState variants
    │   ├── contracts.py   # Session, ProfileStatusRecord, collaborator protocols
    │   ├── errors.py      # UnauthorizedError + classification
    │   └── sequencer.py   # LaunchSequencer state machine
    ├── auth/
    │   ├── session_store.py  # AuthSessionStore (published identity)
    │   └── supabase_auth.py  # Supabase auth adapter
    ├── database/
    │   └── client.py      # Supabase client + async bridge
    ├── services/
    │   ├── profile_service.py  # profiles → ProfileStatusRecord
    │   ├── rsvp_service.py     # event_rsvps reads
    │   └── event_service.py    # events reads
    └── stores/
        └── events_store.py     # Attending-events cache + prefetch job
"""

__version__ = "0.1.0"
