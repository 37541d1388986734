from core.lifecycle import INVALID_GRANT, AppState, InProcessHost, LifecycleSignal


def test_post_updates_state_before_handlers_run():
    host = InProcessHost()
    seen = []
    host.subscribe(LifecycleSignal.DID_ENTER_BACKGROUND, lambda: seen.append(host.application_state))
    host.subscribe(LifecycleSignal.WILL_ENTER_FOREGROUND, lambda: seen.append(host.application_state))

    host.post(LifecycleSignal.DID_ENTER_BACKGROUND)
    assert host.application_state is AppState.BACKGROUND
    host.post(LifecycleSignal.WILL_ENTER_FOREGROUND)

    assert seen == [AppState.BACKGROUND, AppState.INACTIVE]
    assert host.application_state is AppState.ACTIVE


def test_handlers_run_in_registration_order():
    host = InProcessHost()
    calls = []
    host.subscribe(LifecycleSignal.WILL_TERMINATE, lambda: calls.append("a"))
    host.subscribe(LifecycleSignal.WILL_TERMINATE, lambda: calls.append("b"))
    host.subscribe(LifecycleSignal.DID_ENTER_BACKGROUND, lambda: calls.append("other"))

    host.post(LifecycleSignal.WILL_TERMINATE)

    assert calls == ["a", "b"]


def test_subscription_cancel_is_idempotent():
    host = InProcessHost()
    calls = []
    sub = host.subscribe(LifecycleSignal.WILL_TERMINATE, lambda: calls.append(1))
    assert sub.active

    sub.cancel()
    sub.cancel()
    host.post(LifecycleSignal.WILL_TERMINATE)

    assert not sub.active
    assert calls == []
    assert host.handler_count(LifecycleSignal.WILL_TERMINATE) == 0


def test_signals_accept_plain_strings():
    host = InProcessHost()
    calls = []
    host.subscribe("will_terminate", lambda: calls.append(1))
    host.post("will_terminate")
    assert calls == [1]


def test_grants_are_unique_and_released():
    host = InProcessHost()
    first = host.begin_background_task()
    second = host.begin_background_task()

    assert INVALID_GRANT not in (first, second)
    assert first != second
    assert host.outstanding_grants == sorted([first, second])

    host.end_background_task(first)
    host.end_background_task(first)
    host.end_background_task(INVALID_GRANT)
    assert host.outstanding_grants == [second]


def test_expire_runs_handlers_and_clears_grants():
    host = InProcessHost()
    expired = []
    host.begin_background_task(lambda: expired.append("x"))
    host.begin_background_task()

    assert host.expire_background_tasks() == 2
    assert expired == ["x"]
    assert host.outstanding_grants == []
    assert host.expire_background_tasks() == 0
