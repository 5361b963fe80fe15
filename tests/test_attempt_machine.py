from __future__ import annotations

import pytest

from conftest import make_direct, make_exam, make_mcq
from exam_app.core.models import Coordinates, OptionAnswer, TextAnswer
from exam_app.core.services.attempt_machine import (
    AttemptState,
    AttemptStateMachine,
    InvalidTransitionError,
    SubmissionStatus,
)
from exam_app.core.services.geolocation import GeolocationError, GeolocationFailure


def _machine(exam, tick_source, geolocation, sink, clock, **callbacks):
    return AttemptStateMachine(
        exam,
        tick_source,
        geolocation,
        sink,
        student_id="student-1",
        clock=clock,
        **callbacks,
    )


def _start(machine, geolocation):
    machine.begin()
    machine.request_location()
    geolocation.succeed(Coordinates(59.91, 10.75))


def test_full_attempt_is_scored_and_submitted(exam, tick_source, geolocation, sink, clock):
    states = []
    machine = _machine(exam, tick_source, geolocation, sink, clock, on_state_changed=states.append)

    assert machine.state is AttemptState.INTRO
    machine.begin()
    assert machine.state is AttemptState.LOCATION_CONSENT
    machine.request_location()
    assert machine.is_location_pending
    assert machine.session is None

    geolocation.succeed(Coordinates(59.91, 10.75))
    assert machine.state is AttemptState.AWAITING_ANSWER
    assert machine.current_question.id == "q1"
    assert machine.exam_time_remaining == 60
    assert machine.question_time_remaining == 30
    assert tick_source.active

    clock.advance(10)
    tick_source.fire(10)
    machine.submit_answer(" 42 ")
    assert machine.current_question.id == "q2"
    assert machine.question_time_remaining == 20
    assert machine.exam_time_remaining == 50

    clock.advance(5)
    machine.submit_answer(2)

    assert machine.state is AttemptState.COMPLETED
    assert states[-1] is AttemptState.COMPLETED
    assert not tick_source.active
    assert machine.result.total_score == 3
    assert machine.result.percentage == 100
    assert machine.session.end_time == clock.now

    assert len(sink.submissions) == 1
    submission = sink.submissions[0]
    assert submission.exam_id == "EX1"
    assert submission.score == 100
    assert [record.answer for record in submission.answers] == [TextAnswer("42"), OptionAnswer(2)]
    assert machine.submission_status is SubmissionStatus.PENDING

    sink.complete(None)
    assert machine.submission_status is SubmissionStatus.SUBMITTED


def test_question_timeout_records_and_advances(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    _start(machine, geolocation)

    tick_source.fire(29)
    assert machine.current_question.id == "q1"
    tick_source.fire(1)

    assert machine.current_question.id == "q2"
    assert machine.session.answers[0].time_expired
    assert machine.session.answers[0].answer is None
    assert machine.exam_time_remaining == 30
    assert machine.session.time_remaining == 30


def test_every_question_timing_out_completes_with_zero(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    _start(machine, geolocation)

    tick_source.fire(50)

    assert machine.state is AttemptState.COMPLETED
    assert [record.time_expired for record in machine.session.answers] == [True, True]
    assert machine.result.total_score == 0
    assert machine.result.incorrect_answers == 2


def test_exam_expiry_ends_attempt_mid_question(tick_source, geolocation, sink, clock):
    exam = make_exam(
        [
            make_direct("q1", time_limit_seconds=45),
            make_mcq("q2", time_limit_seconds=45),
            make_mcq("q3", time_limit_seconds=45),
        ],
        duration_minutes=1,
    )
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    _start(machine, geolocation)

    tick_source.fire(45)
    assert machine.current_question.id == "q2"
    tick_source.fire(15)

    assert machine.state is AttemptState.COMPLETED
    assert [record.question_id for record in machine.session.answers] == ["q1", "q2"]
    assert all(record.time_expired for record in machine.session.answers)
    assert machine.result.incorrect_answers == 3
    assert len(sink.submissions) == 1

    tick_source.fire(5)
    assert len(machine.session.answers) == 2


def test_exam_and_question_expiring_together_complete_once(tick_source, geolocation, sink, clock):
    exam = make_exam([make_direct("q1", time_limit_seconds=60), make_mcq("q2")], duration_minutes=1)
    completed = []
    machine = _machine(exam, tick_source, geolocation, sink, clock, on_completed=completed.append)
    _start(machine, geolocation)

    tick_source.fire(60)

    assert machine.state is AttemptState.COMPLETED
    assert len(completed) == 1
    assert [record.question_id for record in machine.session.answers] == ["q1"]
    assert len(sink.submissions) == 1


def test_on_tick_reports_both_clocks(exam, tick_source, geolocation, sink, clock):
    ticks = []
    machine = _machine(exam, tick_source, geolocation, sink, clock, on_tick=lambda e, q: ticks.append((e, q)))
    _start(machine, geolocation)

    tick_source.fire(2)

    assert ticks == [(59, 29), (58, 28)]


def test_location_failure_keeps_consent_state_and_allows_retry(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    machine.begin()
    machine.request_location()
    geolocation.fail(GeolocationError(GeolocationFailure.DENIED))

    assert machine.state is AttemptState.LOCATION_CONSENT
    assert "denied" in machine.consent_error
    assert machine.session is None
    assert not tick_source.active

    machine.request_location()
    assert machine.consent_error is None
    geolocation.succeed()
    assert machine.state is AttemptState.AWAITING_ANSWER


def test_pending_location_request_is_not_repeated(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    machine.begin()
    machine.request_location()
    machine.request_location()
    assert geolocation.requests == 1


def test_late_position_fix_is_ignored(exam, tick_source, geolocation, sink, clock):
    started = []
    machine = _machine(exam, tick_source, geolocation, sink, clock, on_started=started.append)
    _start(machine, geolocation)
    geolocation.succeed(Coordinates(1, 1))

    assert len(started) == 1
    assert machine.session.coordinates == Coordinates(59.91, 10.75)
    assert tick_source.start_count == 1


def test_actions_outside_their_state_raise(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    with pytest.raises(InvalidTransitionError):
        machine.submit_answer("42")
    with pytest.raises(InvalidTransitionError):
        machine.request_location()
    machine.begin()
    with pytest.raises(InvalidTransitionError):
        machine.begin()


def test_invalid_answer_is_rejected_without_advancing(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    _start(machine, geolocation)
    machine.submit_answer("42")

    with pytest.raises(ValueError):
        machine.submit_answer(7)

    assert machine.current_question.id == "q2"
    assert len(machine.session.answers) == 1
    tick_source.fire(1)
    assert machine.question_time_remaining == 19


def test_submission_failure_keeps_result(exam, tick_source, geolocation, sink, clock):
    finished = []
    machine = _machine(exam, tick_source, geolocation, sink, clock, on_submission_finished=finished.append)
    _start(machine, geolocation)
    machine.submit_answer("41")
    machine.submit_answer(None)

    sink.complete(RuntimeError("server unreachable"))

    assert finished == [SubmissionStatus.FAILED]
    assert machine.submission_status is SubmissionStatus.FAILED
    assert machine.submission_error == "server unreachable"
    assert machine.state is AttemptState.COMPLETED
    assert machine.result.percentage == 0


def test_exam_without_questions_completes_on_start(tick_source, geolocation, sink, clock):
    machine = _machine(make_exam([]), tick_source, geolocation, sink, clock)
    _start(machine, geolocation)

    assert machine.state is AttemptState.COMPLETED
    assert machine.result.percentage == 0
    assert sink.submissions[0].answers == ()
    assert not tick_source.active


def test_two_question_scenario_scores_full_marks(tick_source, geolocation, sink, clock):
    exam = make_exam(
        [
            make_direct("q1", answer="42", tolerance=0),
            make_mcq("q2", options=["A", "B", "C"], correct_options=[0]),
        ]
    )
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    _start(machine, geolocation)

    machine.submit_answer("42")
    machine.submit_answer(0)

    result = machine.result
    assert (result.total_score, result.max_possible_score, result.percentage) == (2, 2, 100)


def test_rejected_answer_keeps_question_deadline(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    _start(machine, geolocation)
    tick_source.fire(25)

    with pytest.raises(ValueError):
        machine.submit_answer(1)

    assert machine.question_time_remaining == 5
    tick_source.fire(5)
    assert machine.current_question.id == "q2"
    assert machine.session.answers[0].time_expired


def test_blank_direct_answer_counts_as_answered(exam, tick_source, geolocation, sink, clock):
    machine = _machine(exam, tick_source, geolocation, sink, clock)
    _start(machine, geolocation)

    machine.submit_answer("")

    record = machine.session.answers[0]
    assert record.answer == TextAnswer("")
    assert not record.time_expired
    machine.submit_answer(None)
    assert machine.result.correct_answers == 0
