from lms_quiz import main
from lms_quiz.core.config import cfg


def test_run_serves_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))

    main.run()

    assert len(calls) == 1
    app, kw = calls[0]
    assert app is main.app
    assert kw["port"] == cfg.APP_PORT
    assert kw["log_level"] == cfg.LOG_LEVEL.lower()
