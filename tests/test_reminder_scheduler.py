from types import SimpleNamespace

from apscheduler.triggers.interval import IntervalTrigger

from app.services.push_service import send_push
from app.services.reminder_scheduler import TriggerReplacement


def _fields(job):
    return {f.name: str(f) for f in job.trigger.fields}


def _fixed(time="09:30 AM", repeat_days=(0, 2, 4)):
    return SimpleNamespace(type="fixed", name="Water plants", message="", time=time,
                           repeat_days=list(repeat_days), interval_minutes=None)


def test_fixed_reminder_gets_one_trigger_per_day(scheduler):
    handles = scheduler.schedule_fixed("Water plants", "Balcony too", "09:30 AM", [0, 2, 4])

    assert len(handles) == 3
    assert len(set(handles)) == 3
    assert sorted(scheduler.live_handles()) == sorted(handles)

    days = []
    for handle in handles:
        job = scheduler.scheduler.get_job(handle)
        fields = _fields(job)
        assert fields["hour"] == "9"
        assert fields["minute"] == "30"
        days.append(fields["day_of_week"])
        assert job.func is send_push
        assert job.kwargs["title"] == "Water plants"
        assert job.kwargs["body"] == "Balcony too"

    assert days == ["mon", "wed", "fri"]

    assert scheduler.cancel_all(handles) == []
    assert scheduler.live_handles() == []


def test_sunday_and_monday_land_on_the_right_trigger_day(scheduler):
    sunday = scheduler.schedule_fixed("Laundry", "", "12:00 AM", [6])[0]
    monday = scheduler.schedule_fixed("Laundry", "", "12:00 PM", [0])[0]

    assert _fields(scheduler.scheduler.get_job(sunday))["day_of_week"] == "sun"
    assert _fields(scheduler.scheduler.get_job(sunday))["hour"] == "0"
    assert _fields(scheduler.scheduler.get_job(monday))["day_of_week"] == "mon"
    assert _fields(scheduler.scheduler.get_job(monday))["hour"] == "12"


def test_empty_message_falls_back_to_name(scheduler):
    handle = scheduler.schedule_fixed("Pay rent", "", "08:00 AM", [3])[0]

    assert scheduler.scheduler.get_job(handle).kwargs["body"] == "Pay rent"


def test_interval_reminder_is_a_single_trigger(scheduler):
    definition = SimpleNamespace(type="interval", name="Drink water", message="Stay hydrated",
                                 time=None, repeat_days=None, interval_minutes=45)

    handles = scheduler.schedule(definition, token="ExponentPushToken[asha]")

    assert len(handles) == 1
    job = scheduler.scheduler.get_job(handles[0])
    assert isinstance(job.trigger, IntervalTrigger)
    assert job.trigger.interval.total_seconds() == 45 * 60
    assert job.kwargs["tokens"] == ["ExponentPushToken[asha]"]


def test_cancel_unknown_handle_is_not_fatal(scheduler):
    handle = scheduler.schedule_fixed("Laundry", "", "07:00 PM", [5])[0]

    assert scheduler.cancel(handle) is True
    assert scheduler.cancel(handle) is False
    assert scheduler.cancel_all([handle, "does-not-exist"]) == []
    assert not scheduler.is_scheduled(handle)


def _stored(scheduler, definition, is_active=True):
    handles = scheduler.schedule(definition) if is_active else []
    return SimpleNamespace(**vars(definition), notification_ids=handles, is_active=is_active)


def test_replacement_cancels_old_triggers_before_scheduling(scheduler):
    reminder = _stored(scheduler, _fixed(repeat_days=[0]))
    old = reminder.notification_ids

    replacement = TriggerReplacement(scheduler, reminder)
    new = replacement.apply(_fixed(repeat_days=[1, 3]), enabled=True)

    assert len(new) == 2
    assert not scheduler.is_scheduled(old[0])
    assert sorted(scheduler.live_handles()) == sorted(new)


def test_replacement_disabled_leaves_nothing_scheduled(scheduler):
    reminder = _stored(scheduler, _fixed())

    new = TriggerReplacement(scheduler, reminder).apply(reminder, enabled=False)

    assert new == []
    assert scheduler.live_handles() == []


def test_revert_of_new_reminder_only_touches_its_triggers(scheduler):
    unrelated = scheduler.schedule(_fixed(repeat_days=[6]))
    replacement = TriggerReplacement(scheduler)
    new = replacement.apply(_fixed(repeat_days=[0, 1]), enabled=True)

    assert replacement.revert() == []

    assert all(not scheduler.is_scheduled(h) for h in new)
    assert scheduler.live_handles() == unrelated


def test_revert_brings_back_the_previous_schedule(scheduler):
    reminder = _stored(scheduler, _fixed(repeat_days=[0, 2]))
    replacement = TriggerReplacement(scheduler, reminder)
    new = replacement.apply(_fixed(time="06:00 PM", repeat_days=[4]), enabled=True, token="ExponentPushToken[asha]")

    # the caller edits the row in place after apply
    reminder.repeat_days = [4]
    restored = replacement.revert()

    assert not scheduler.is_scheduled(new[0])
    assert sorted(scheduler.live_handles()) == sorted(restored)
    jobs = [scheduler.scheduler.get_job(h) for h in restored]
    assert [_fields(job)["day_of_week"] for job in jobs] == ["mon", "wed"]
    assert all(_fields(job)["hour"] == "9" for job in jobs)
    assert jobs[0].kwargs["tokens"] == ["ExponentPushToken[asha]"]


def test_revert_keeps_inactive_reminder_unscheduled(scheduler):
    reminder = _stored(scheduler, _fixed(), is_active=False)
    replacement = TriggerReplacement(scheduler, reminder)
    replacement.apply(reminder, enabled=True)

    assert replacement.revert() == []
    assert scheduler.live_handles() == []
