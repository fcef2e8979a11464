"""
Tests for CommandRunner — failure classification, dry-run, read-only queries.
"""

import logging

import pytest

from gemini_updater.services.updater.execution.command_runner import (
    CommandRunner,
    StepFailedError,
)


class TestExecute:
    def test_success(self, runner, ctx, fake_shell):
        assert runner.execute(["brew", "update"], "Refresh") is True
        assert fake_shell.ran(["brew", "update"])
        assert ctx.error_count == 0
        assert ctx.warning_count == 0

    def test_allowed_failure(self, runner, ctx, fake_shell):
        fake_shell.respond(["npm", "update", "-g"], exit_code=1)
        assert runner.execute(["npm", "update", "-g"], "Bulk", allow_failure=True) is False
        assert ctx.error_count == 1
        assert ctx.warning_count == 1

    def test_fatal_failure(self, runner, ctx, fake_shell):
        fake_shell.respond(["brew", "update"], exit_code=2)
        with pytest.raises(StepFailedError) as exc:
            runner.execute(["brew", "update"], "Refresh")
        assert exc.value.exit_code == 2
        assert exc.value.description == "Refresh"
        assert ctx.error_count == 1
        assert ctx.warning_count == 0

    def test_timeout_is_a_failure(self, runner, ctx, fake_shell, caplog):
        fake_shell.respond(["brew", "upgrade"], exit_code=124, timed_out=True)
        with caplog.at_level(logging.ERROR):
            assert runner.execute(["brew", "upgrade"], "Upgrade", allow_failure=True) is False
        assert "timed out" in caplog.text
        assert ctx.error_count == 1

    def test_default_timeout_from_config(self, make_context, fake_shell, config):
        cfg = config.model_copy(update={"command_timeout": 45.0})
        runner = CommandRunner(make_context(cfg=cfg), fake_shell.as_shell())
        runner.execute(["brew", "update"], "Refresh")
        runner.execute(["brew", "upgrade"], "Upgrade", timeout=5)
        assert fake_shell.call_kwargs[0]["timeout"] == 45.0
        assert fake_shell.call_kwargs[1]["timeout"] == 5

    def test_cwd_passed_through(self, runner, fake_shell):
        runner.execute(["npm", "install", "x"], "Local", cwd="/project")
        assert fake_shell.call_kwargs[-1]["cwd"] == "/project"


class TestDryRun:
    def test_nothing_executed(self, make_context, fake_shell, caplog):
        runner = CommandRunner(make_context(dry_run=True), fake_shell.as_shell())
        fake_shell.respond(["brew", "update"], exit_code=1)
        with caplog.at_level(logging.INFO):
            assert runner.execute(["brew", "update"], "Refresh") is True
        assert fake_shell.calls == []
        assert "DRY RUN: Would execute: brew update" in caplog.text

    def test_run_returns_planned_result(self, make_context, fake_shell):
        runner = CommandRunner(make_context(dry_run=True), fake_shell.as_shell())
        result = runner.run(["gemini", "/ide", "enable"], "IDE")
        assert result.dry_run
        assert result.ok

    def test_no_counters(self, make_context, fake_shell):
        ctx = make_context(dry_run=True)
        runner = CommandRunner(ctx, fake_shell.as_shell())
        runner.execute(["brew", "update"], "Refresh")
        assert (ctx.error_count, ctx.warning_count) == (0, 0)

    def test_queries_still_run(self, make_context, fake_shell):
        runner = CommandRunner(make_context(dry_run=True), fake_shell.as_shell())
        result = runner.query(["node", "-v"])
        assert result.output.strip() == "v20.11.0"
        assert fake_shell.ran(["node", "-v"])


class TestQuery:
    def test_separate_stderr_and_query_timeout(self, runner, fake_shell, config):
        runner.query(["npm", "-v"])
        kwargs = fake_shell.call_kwargs[-1]
        assert kwargs["merge_stderr"] is False
        assert kwargs["timeout"] == config.query_timeout

    def test_failure_is_never_counted(self, runner, ctx, fake_shell):
        fake_shell.respond(["npm", "-v"], exit_code=1)
        assert not runner.query(["npm", "-v"]).ok
        assert ctx.error_count == 0


class TestTranscript:
    def test_output_written_to_transcript(self, runner, fake_shell, caplog):
        fake_shell.respond(["brew", "update"], output="Already up-to-date.\n")
        with caplog.at_level(logging.INFO, logger="gemini_updater.transcript"):
            runner.execute(["brew", "update"], "Refresh")
        assert "Command output: Refresh" in caplog.text
        assert "Already up-to-date." in caplog.text
