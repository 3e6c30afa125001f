"""
Tests for the processor registry: registration, extension, sealing and lookup.
"""

import logging

import allure
import pytest
from hypothesis import given, settings, strategies as st

from termshell.command_system import FunctionProcessor, ProcessorMetadata, ProcessorRegistry


async def _noop(command, context):
    return None


def make(command, **attributes):
    return FunctionProcessor(command, _noop, **attributes)


@pytest.fixture
def registry():
    return ProcessorRegistry()


@allure.feature("Processor Registry")
@allure.story("Registration appends new commands")
def test_register_new_processor(registry):
    processor = make("hello")

    assert registry.register_processor(processor) is True
    assert registry.processors == [processor]
    assert registry.has_command("HELLO")


@allure.feature("Processor Registry")
@allure.story("Non-sealed processors are replaced in place")
def test_register_replaces_unsealed_processor(registry):
    first = make("first")
    original = make("hello")
    replacement = make("hello")
    registry.register_processor(first)
    registry.register_processor(original)

    assert registry.register_processor(replacement) is True
    assert registry.processors == [first, replacement]


@allure.feature("Processor Registry")
@allure.story("An alias collision counts as the same command")
def test_alias_collision_replaces(registry):
    listing = make("list", aliases=["ls"])
    registry.register_processor(listing)
    replacement = make("ls")

    registry.register_processor(replacement)

    assert registry.processors == [replacement]


@allure.feature("Processor Registry")
@allure.story("Sealed processors reject replacement")
@allure.severity(allure.severity_level.CRITICAL)
def test_sealed_processor_rejects_replacement(registry, caplog):
    sealed = make("core", metadata=ProcessorMetadata(sealed=True))
    registry.register_processor(sealed)

    with caplog.at_level(logging.WARNING, logger="termshell.command_system.registry"):
        assert registry.register_processor(make("core")) is False

    assert registry.processors == [sealed]
    assert "sealed" in caplog.text


@allure.feature("Processor Registry")
@allure.story("Extension wraps a sealed processor and unregister restores it")
@allure.severity(allure.severity_level.CRITICAL)
def test_extension_wraps_and_restores(registry):
    sealed = make("core", metadata=ProcessorMetadata(sealed=True))
    registry.register_processor(sealed)
    extension = make("core", extends_processor=True)

    assert registry.register_processor(extension) is True
    assert registry.processors == [extension]
    assert extension.original_processor is sealed

    assert registry.unregister_processor(extension) is True
    assert registry.processors == [sealed]


def test_extension_chain_unwinds_one_level_at_a_time(registry):
    base = make("core")
    first = make("core", extends_processor=True)
    second = make("core", extends_processor=True)
    for processor in (base, first, second):
        registry.register_processor(processor)

    assert second.original_processor is first
    assert first.original_processor is base

    registry.unregister_processor(second)
    assert registry.processors == [first]
    registry.unregister_processor(first)
    assert registry.processors == [base]


def test_unregister_sealed_without_original_is_refused(registry, caplog):
    sealed = make("core", metadata=ProcessorMetadata(sealed=True))
    registry.register_processor(sealed)

    with caplog.at_level(logging.WARNING):
        assert registry.unregister_processor(sealed) is False

    assert registry.processors == [sealed]


def test_unregister_removes_plain_processor(registry):
    processor = make("temp")
    registry.register_processor(processor)

    assert registry.unregister_processor(processor) is True
    assert registry.processors == []
    assert registry.unregister_processor(processor) is False


@allure.feature("Processor Registry")
@allure.story("Lookup is case-insensitive on names and aliases")
@settings(max_examples=50)
@given(name=st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=10), data=st.data())
def test_lookup_is_case_insensitive(name, data):
    registry = ProcessorRegistry()
    processor = make(name, aliases=[name + "x"])
    registry.register_processor(processor)

    flipped = "".join(
        c.upper() if data.draw(st.booleans()) else c for c in name
    )

    assert registry.find_processor(flipped, []) is processor
    assert registry.find_processor((name + "x").upper(), []) is processor


def test_find_walks_children_and_links_parents(registry):
    add = make("add")
    remove = make("remove")
    pkg = make("pkg", processors=[add, remove])
    registry.register_processor(pkg)

    assert registry.find_processor("pkg", ["add"]) is add
    assert registry.find_processor("pkg", []) is pkg
    assert registry.find_processor("pkg", ["missing"]) is None
    assert add.parent is pkg
    assert registry.get_root_processor(add) is pkg


def test_leaf_with_free_text_consumes_rest(registry):
    echo = make("echo", allow_unlisted_commands=True)
    needs = make("needs", value_required=True)
    plain = make("plain")
    for processor in (echo, needs, plain):
        registry.register_processor(processor)

    assert registry.find_processor("echo", ["hello", "world"]) is echo
    assert registry.find_processor("needs", ["x"]) is needs
    assert registry.find_processor("plain", ["x"]) is None


def test_find_in_collection_restricts_search(registry):
    child = make("child")
    registry.register_processor(make("root", processors=[child]))

    assert registry.find_processor_in_collection("child", [], [child]) is child
    assert registry.find_processor("child", []) is None


def test_list_commands_hides_hidden_processors(registry):
    registry.register_processor(make("visible", description="shown", aliases=["v"]))
    registry.register_processor(make("secret", metadata=ProcessorMetadata(hidden=True)))

    assert registry.list_commands() == [
        {"name": "visible", "description": "shown", "aliases": ["v"]},
    ]
    assert len(registry.list_commands(include_hidden=True)) == 2


def test_initial_processors_are_registered():
    processors = [make("a"), make("b")]

    assert ProcessorRegistry(processors).processors == processors


@allure.feature("Processor Registry")
@allure.story("A plain replacement does not inherit the wrapped original")
def test_replacing_an_extension_drops_the_wrapped_original(registry):
    base = make("x")
    extension = make("x", extends_processor=True)
    replacement = make("x")
    for processor in (base, extension, replacement):
        registry.register_processor(processor)

    assert replacement.original_processor is None
    assert registry.unregister_processor(replacement) is True
    assert registry.find_processor("x", []) is None
    assert registry.processors == []


def test_names_colliding_with_several_processors_are_rejected(registry, caplog):
    first = make("first")
    second = make("second")
    registry.register_processor(first)
    registry.register_processor(second)

    with caplog.at_level(logging.WARNING, logger="termshell.command_system.registry"):
        assert registry.register_processor(make("first", aliases=["second"])) is False

    assert registry.processors == [first, second]
    assert registry.find_processor("second", []) is second
    assert "collides with several processors" in caplog.text
