"""
Tests for the command executor: chaining, piping, redirects, validation,
hooks, exit handling and the built-in flags.
"""

import asyncio

import allure
import pytest

from conftest import ShellHarness, names, recording_processor
from termshell.command_system import (
    CommandProcessor,
    FunctionProcessor,
    ParameterDescriptor,
    ProcessCommand,
    ProcessorHook,
    ValidationResult,
)


@allure.feature("Command Executor")
@allure.story("&& runs the next command only after success")
@allure.severity(allure.severity_level.CRITICAL)
def test_and_runs_after_success(shell, calls):
    shell.run("ok && second")

    assert names(calls) == ["ok", "second"]


def test_and_skips_after_failure(shell, calls):
    output = shell.run("fail && second")

    assert names(calls) == ["fail"]
    assert "Process exited with code 1" in output


@allure.feature("Command Executor")
@allure.story("|| runs the next command only after failure")
@allure.severity(allure.severity_level.CRITICAL)
def test_or_runs_after_failure(shell, calls):
    shell.run("fail || second")
    shell.run("ok || third")

    assert names(calls) == ["fail", "second", "ok"]


@allure.feature("Command Executor")
@allure.story("Skipped commands leave the last result untouched")
@allure.severity(allure.severity_level.CRITICAL)
def test_skipped_segments_do_not_change_success(shell, calls):
    shell.run("fail && second || third")
    shell.run("ok || second && third")

    assert names(calls) == ["fail", "third", "ok", "third"]


def test_failure_never_halts_the_line(shell, calls):
    shell.run("fail | second")

    assert names(calls) == ["fail", "second"]


@allure.feature("Command Executor")
@allure.story("Pipe hands the previous output to the next command")
@allure.severity(allure.severity_level.CRITICAL)
def test_pipe_passes_output_as_data(shell, calls):
    shell.run("producer | consumer")

    (_, consumed), = [c for c in calls if c[0] == "consumer"]
    assert consumed.data == "payload"


def test_data_only_follows_a_pipe(shell, calls):
    shell.run("producer && consumer")

    (_, consumed), = [c for c in calls if c[0] == "consumer"]
    assert consumed.data is None


def test_segment_without_output_pipes_nothing(shell, calls):
    shell.run("producer | fail | consumer")

    assert names(calls) == ["producer", "fail", "consumer"]
    assert calls[1][1].data == "payload"
    assert calls[2][1].data is None


def test_pipeline_data_survives_skipped_segment(shell, calls):
    shell.run("producer || second | consumer")

    assert names(calls) == ["producer", "consumer"]
    assert calls[-1][1].data == "payload"


@allure.feature("Command Executor")
@allure.story(">> appends the pipeline payload to a file")
@allure.severity(allure.severity_level.CRITICAL)
def test_append_redirect_writes_file(shell, tmp_path):
    shell.run("echo hello >> out.txt")
    shell.run("echo again >> out.txt")

    assert (tmp_path / "workspace" / "out.txt").read_text(encoding="utf-8") == "helloagain"


def test_append_redirect_clears_payload(shell, calls, tmp_path):
    shell.run("producer >> out.txt | consumer")

    assert (tmp_path / "workspace" / "out.txt").read_text(encoding="utf-8") == "payload"
    assert calls[-1][1].data is None


def test_append_redirect_serializes_structured_data(tmp_path):
    harness = ShellHarness(
        processors=[recording_processor("rows", [], output={"a": 1})],
        workspace=tmp_path,
    )

    harness.run("rows >> rows.json")

    assert (tmp_path / "rows.json").read_text(encoding="utf-8") == '{"a": 1}'


def test_append_without_path_is_a_failure(shell, calls):
    output = shell.run("ok >> || second")

    assert "Missing file path after >>" in output
    assert names(calls) == ["ok", "second"]


def test_append_without_file_system(calls):
    harness = ShellHarness(processors=[recording_processor("producer", calls, output="x")])

    output = harness.run("producer >> out.txt")

    assert ">> redirect requires the file system plugin" in output


@allure.feature("Command Executor")
@allure.story("Unknown commands are reported")
def test_command_not_found(shell, calls):
    output = shell.run("nope && ok")

    assert "Command not found: nope" in output
    assert shell.exit_code == -1
    assert calls == []

    shell.run("nope || ok")
    assert names(calls) == ["ok"]


@allure.feature("Command Executor")
@allure.story("Required parameters are validated")
@allure.severity(allure.severity_level.CRITICAL)
def test_missing_required_parameters(calls):
    processor = recording_processor(
        "deploy",
        calls,
        parameters=[
            ParameterDescriptor("env", required=True, aliases=["e"]),
            ParameterDescriptor("tag", required=True),
        ],
    )
    harness = ShellHarness(processors=[processor])

    report = harness.run("deploy")
    assert "Missing required parameters: --env, --tag" in report
    assert calls == []

    output = harness.run("deploy --tag=v1")

    assert "Missing required parameters: --env" in output
    assert "--tag" not in output.split("Missing required parameters:")[1].splitlines()[0]
    assert harness.exit_code == -1
    assert calls == []

    harness.run("deploy -e=prod --tag=v1")
    assert names(calls) == ["deploy"]
    assert calls[0][1].args["env"] == "prod"


def test_parameter_validators_are_itemized(calls):
    def positive(value):
        if isinstance(value, int) and value > 0:
            return ValidationResult.ok()
        return ValidationResult.error("must be positive")

    processor = recording_processor(
        "serve",
        calls,
        parameters=[
            ParameterDescriptor("port", type="number", validator=positive),
            ParameterDescriptor("workers", type="number", validator=positive),
        ],
    )
    harness = ShellHarness(processors=[processor])

    output = harness.run("serve --port=-1 --workers=0")

    assert "Invalid parameters:" in output
    assert '1. --port = "-1" → must be positive' in output
    assert '2. --workers = "0" → must be positive' in output
    assert calls == []

    harness.run("serve --port=8080")
    assert names(calls) == ["serve"]


def test_processor_validate_before_execution():
    class Guarded(CommandProcessor):
        command = "guarded"
        allow_unlisted_commands = True

        def __init__(self):
            super().__init__()
            self.ran = False

        def validate_before_execution(self, command, context):
            if command.value == "bad":
                return ValidationResult.error("bad value")
            return ValidationResult.ok()

        async def process_command(self, command, context):
            self.ran = True

    guarded = Guarded()
    harness = ShellHarness(processors=[guarded])

    output = harness.run("guarded bad")
    assert "bad value" in output
    assert harness.exit_code == -1
    assert guarded.ran is False

    harness.run("guarded good")
    assert guarded.ran is True


def test_value_required(calls):
    harness = ShellHarness(processors=[recording_processor("needs", calls, value_required=True)])

    output = harness.run("needs")
    assert "Value required: needs <value>" in output
    assert harness.exit_code == -1

    harness.run("needs some thing")
    assert calls[0][1].value == "some thing"


@allure.feature("Command Executor")
@allure.story("Hooks run around the handler")
def test_hooks_run_in_order():
    events = []

    async def handler(command, context):
        events.append("handler")

    processor = FunctionProcessor(
        "hooked",
        handler,
        hooks=[
            ProcessorHook("after", lambda ctx: events.append("after")),
            ProcessorHook("before", lambda ctx: events.append("before-1")),
            ProcessorHook("before", lambda ctx: events.append("before-2")),
        ],
    )
    harness = ShellHarness(processors=[processor])

    harness.run("hooked")

    assert events == ["before-1", "before-2", "handler", "after"]


def test_after_hooks_skipped_when_handler_fails():
    events = []

    async def handler(command, context):
        raise RuntimeError("boom")

    processor = FunctionProcessor(
        "broken",
        handler,
        hooks=[ProcessorHook("after", lambda ctx: events.append("after"))],
    )
    harness = ShellHarness(processors=[processor])

    output = harness.run("broken")

    assert events == []
    assert "Error executing command: boom" in output
    assert harness.exit_code == -1


@allure.feature("Command Executor")
@allure.story("Explicit exit codes")
def test_exit_zero_counts_as_success(calls):
    harness = ShellHarness(processors=[
        recording_processor("done", calls, exit_code=0),
        recording_processor("next", calls),
    ])

    output = harness.run("done && next")

    assert "Process exited successfully with code 0" in output
    assert names(calls) == ["done", "next"]


def test_exit_aborts_context(calls):
    harness = ShellHarness(processors=[recording_processor("fail", calls, exit_code=2)])
    aborted = []
    harness.context.on_abort.subscribe(lambda: aborted.append(True))

    harness.run("fail")

    assert aborted == [True]
    assert harness.context.cancellation_token.cancelled
    assert harness.exit_code == 2


def test_sync_handlers_are_supported():
    seen = []
    harness = ShellHarness(processors=[FunctionProcessor("sync", lambda command, context: seen.append(command.command))])

    harness.run("sync")

    assert seen == ["sync"]
    assert harness.exit_code == 0


@allure.feature("Command Executor")
@allure.story("Built-in flags")
def test_version_flag(calls):
    harness = ShellHarness(processors=[
        recording_processor("tool", calls, version="2.3.4"),
        recording_processor("plain", calls),
    ])

    assert "2.3.4" in harness.run("tool --version")
    assert "1.0.0" in harness.run("plain -v")
    assert calls == []


def test_help_flag_describes_command(calls):
    harness = ShellHarness(processors=[recording_processor("tool", calls)])

    output = harness.run("tool --help")

    assert "Command: tool" in output
    assert "tool command" in output
    assert calls == []


def test_context_flag_pins_processor(calls):
    add = recording_processor("add", calls)
    pkg = recording_processor("pkg", calls, processors=[add])
    harness = ShellHarness(processors=[pkg])

    output = harness.run("pkg --context")

    assert "Set pkg as context processor" in output
    assert harness.context.context_processor is pkg

    harness.run("add")
    assert names(calls) == ["add"]

    harness.run("pkg")
    assert "Command not found: pkg" in harness.output

    harness.context.set_context_processor(None)
    harness.run("pkg")
    assert names(calls) == ["add", "pkg"]


def test_chain_commands_are_lower_cased(calls):
    add = recording_processor("add", calls, allow_unlisted_commands=True)
    harness = ShellHarness(processors=[recording_processor("pkg", calls, processors=[add])])

    harness.run("PKG Add Foo")

    (_, command), = calls
    assert command.command == "PKG Add Foo"
    assert command.chain_commands == ["add", "foo"]
    assert command.value == "Foo"


def test_show_help_reenters_executor(calls):
    harness = ShellHarness(processors=[recording_processor("tool", calls)])

    asyncio.run(harness.executor.show_help(ProcessCommand(command="tool", raw_command="tool"), harness.context))

    assert "Command: tool" in harness.output


def test_list_and_find_delegate_to_registry(shell):
    assert any(cmd["name"] == "echo" for cmd in shell.executor.list_commands())
    assert shell.executor.find_processor("alias", ["ls"]).command == "ls"
    assert shell.executor.find_processor("missing") is None


def test_initialize_errors_do_not_stop_boot():
    class Broken(CommandProcessor):
        command = "broken"

        async def initialize(self, context):
            raise RuntimeError("cannot start")

        async def process_command(self, command, context):
            context.writer.writeln("still works")

    harness = ShellHarness(processors=[Broken()])

    assert "Error initializing processor broken: cannot start" in harness.output
    assert "still works" in harness.run("broken")


@pytest.mark.parametrize("line", ["", "   ", "&&", "| |"])
def test_degenerate_lines_do_nothing(shell, calls, line):
    shell.run(line)

    assert calls == []
