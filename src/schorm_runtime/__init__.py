"""
schorm_runtime — Runtime layer for generated SCORM learning content
===================================================================
Talks to the host tracking service, tracks media completion, and scores
quizzes for pages produced by the schorm course builder.

Module map
----------
  config.py          Settings loaded from .env; logging setup.
  fields.py          Closed enumeration of data-model field names + status values.
  discovery.py       Walks the context chain looking for the tracking API.
  bridge.py          DataModelBridge: non-throwing wrapper over the handle.
  storage.py         Namespaced key/value stores (memory, SQLite) for preview mode.
  session.py         RuntimeSession: one per page/session, owns bridge + store.
  preview.py         PreviewTrackingHandle: in-process mock of the host API.
  media.py           MediaCompletionTracker: idempotent per-item completion.
  quiz_model.py      Pydantic QuizSpec + five question variants.
  quiz_validator.py  Structural checks on raw quiz definitions.
  scoring.py         Per-type evaluators, completeness check, pass/fail.
  assessment.py      QuizAttempt: one-shot submission state machine.
  debug.py           Rich console dumps of tracker / attempt state.

Flow
----
  open_session(contexts) → discover() once → DataModelBridge
  → session.media.register(ids) … mark_completed(id)
  → QuizAttempt(session, quiz).submit(answers)
       → evaluate_quiz → bridge writes + commit → submitted
       → preview mode only: store.save_json("schorm:quiz:<id>")
"""
__version__ = "0.1.0"
