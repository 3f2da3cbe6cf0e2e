"""Unit tests for TemplateRepository resolution, caching and cycle detection."""

from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING

import pytest

from stache.compiler import MustacheCompiler, Template, TextNode
from stache.exceptions import (
    BackendError,
    RecursivePartialError,
    TemplateError,
    TemplateNotFoundError,
    TemplateParseError,
)
from stache.repository import FakeDataSource, PartialResolver, TemplateRepository

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.fixture
def source() -> FakeDataSource:
    return FakeDataSource({"a": "Hello {{>b}}", "b": "World"})


@pytest.fixture
def repository(source: FakeDataSource) -> TemplateRepository:
    return TemplateRepository(source)


# =============================================================================
# Named Resolution
# =============================================================================


class TestTemplateNamed:
    def test_renders_template_with_partial(self, repository: TemplateRepository) -> None:
        assert repository.template_named("a").render() == "Hello World"

    def test_second_lookup_returns_same_instance(
        self, repository: TemplateRepository
    ) -> None:
        first = repository.template_named("a")
        second = repository.template_named("a")

        assert first is second

    def test_cache_hit_only_asks_for_the_id(
        self, repository: TemplateRepository, source: FakeDataSource
    ) -> None:
        _ = repository.template_named("a")
        source.reset_calls()

        _ = repository.template_named("a")

        assert source.id_calls == [("a", None)]
        assert source.content_calls == []

    def test_partial_shares_instance_with_named_lookup(
        self, repository: TemplateRepository
    ) -> None:
        a = repository.template_named("a")
        b = repository.template_named("b")

        assert a.partials == (b,)

    def test_partial_lookup_uses_parent_id_as_base(
        self, repository: TemplateRepository, source: FakeDataSource
    ) -> None:
        _ = repository.template_named("a")

        assert source.id_calls == [("a", None), ("b", source.id_of("a"))]

    def test_template_carries_its_id(
        self, repository: TemplateRepository, source: FakeDataSource
    ) -> None:
        assert repository.template_named("b").template_id == source.id_of("b")

    def test_missing_name_raises_not_found_with_name(
        self, repository: TemplateRepository
    ) -> None:
        with pytest.raises(TemplateNotFoundError) as exc_info:
            _ = repository.template_named("missing")

        assert exc_info.value.name == "missing"
        assert exc_info.value.template_id is None

    def test_missing_partial_reports_enclosing_template(self) -> None:
        source = FakeDataSource({"a": "{{>nope}}"})
        repository = TemplateRepository(source)

        with pytest.raises(TemplateNotFoundError) as exc_info:
            _ = repository.template_named("a")

        assert exc_info.value.name == "nope"
        assert exc_info.value.trail == (source.id_of("a"),)

    def test_content_none_synthesizes_not_found_for_id(self) -> None:
        source = FakeDataSource({"a": "text"})
        source.missing_content.add(source.id_of("a"))
        repository = TemplateRepository(source)

        with pytest.raises(TemplateNotFoundError) as exc_info:
            _ = repository.template_named("a")

        assert exc_info.value.template_id == source.id_of("a")

    def test_different_names_with_same_id_share_template(self) -> None:
        class Aliasing:
            def template_id_for(self, name: str, base_id: Hashable | None) -> str:
                return "shared"

            def template_string_for(self, template_id: Hashable) -> str:
                return "same"

        repository = TemplateRepository(Aliasing())

        assert repository.template_named("x") is repository.template_named("y")


# =============================================================================
# Cycle Detection
# =============================================================================


class TestRecursivePartials:
    def test_self_reference_raises_recursive_partial(self) -> None:
        source = FakeDataSource({"a": "a{{>a}}"})
        repository = TemplateRepository(source)

        with pytest.raises(RecursivePartialError) as exc_info:
            _ = repository.template_named("a")

        assert exc_info.value.template_id == source.id_of("a")

    def test_mutual_reference_raises_recursive_partial(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "{{>a}}"})
        repository = TemplateRepository(source)

        with pytest.raises(RecursivePartialError) as exc_info:
            _ = repository.template_named("a")

        error = exc_info.value
        assert error.template_id == source.id_of("a")
        assert error.trail == (source.id_of("a"), source.id_of("b"))
        assert "id:a -> id:b" in str(error)

    def test_cycle_detected_before_loading_content_again(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "{{>a}}"})
        repository = TemplateRepository(source)

        with pytest.raises(RecursivePartialError):
            _ = repository.template_named("a")

        assert source.content_calls == [source.id_of("a"), source.id_of("b")]

    def test_same_partial_twice_is_not_a_cycle(self) -> None:
        source = FakeDataSource({"a": "{{>b}}-{{>b}}", "b": "x"})
        repository = TemplateRepository(source)

        assert repository.template_named("a").render() == "x-x"
        assert source.content_calls.count(source.id_of("b")) == 1

    def test_diamond_is_not_a_cycle(self) -> None:
        source = FakeDataSource(
            {"a": "{{>b}}{{>c}}", "b": "[{{>d}}]", "c": "({{>d}})", "d": "d"}
        )
        repository = TemplateRepository(source)

        assert repository.template_named("a").render() == "[d](d)"


# =============================================================================
# Failure Unwinding
# =============================================================================


class TestFailureUnwinding:
    def test_stack_is_empty_after_failure(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "{{>a}}"})
        repository = TemplateRepository(source)

        with pytest.raises(RecursivePartialError):
            _ = repository.template_named("a")

        assert repository.is_resolving is False

    def test_failed_resolution_caches_nothing(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "{{#open}}"})
        repository = TemplateRepository(source)

        with pytest.raises(TemplateParseError):
            _ = repository.template_named("a")

        assert repository.cached_template_ids == frozenset()

    def test_successful_partials_before_failure_stay_cached(self) -> None:
        source = FakeDataSource({"a": "{{>b}}{{>c}}", "b": "ok", "c": "{{/x}}"})
        repository = TemplateRepository(source)

        with pytest.raises(TemplateParseError):
            _ = repository.template_named("a")

        assert repository.cached_template_ids == frozenset({source.id_of("b")})

    def test_retry_after_fixing_source_succeeds(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "{{#open}}"})
        repository = TemplateRepository(source)
        with pytest.raises(TemplateParseError):
            _ = repository.template_named("a")

        source.templates["b"] = "fixed"

        assert repository.template_named("a").render() == "fixed"

    def test_parse_error_carries_template_id_and_trail(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "line\n{{#open}}"})
        repository = TemplateRepository(source)

        with pytest.raises(TemplateParseError) as exc_info:
            _ = repository.template_named("a")

        error = exc_info.value
        assert error.template_id == source.id_of("b")
        assert error.line == 2
        assert error.trail == (source.id_of("a"), source.id_of("b"))

    def test_foreign_content_error_becomes_backend_error(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "b"})
        cause = OSError("disk on fire")
        source.fail("b", cause)
        repository = TemplateRepository(source)

        with pytest.raises(BackendError) as exc_info:
            _ = repository.template_named("a")

        error = exc_info.value
        assert error.cause is cause
        assert error.template_id == source.id_of("b")
        assert error.trail == (source.id_of("a"), source.id_of("b"))

    def test_template_error_from_source_propagates_unchanged(self) -> None:
        source = FakeDataSource({"a": "a"})
        raised = BackendError("quota exceeded", template_id=source.id_of("a"))
        source.fail("a", raised)
        repository = TemplateRepository(source)

        with pytest.raises(BackendError) as exc_info:
            _ = repository.template_named("a")

        assert exc_info.value is raised


# =============================================================================
# Template Strings and Missing Data Source
# =============================================================================


class TestTemplateFromString:
    def test_compiles_without_data_source(self) -> None:
        repository = TemplateRepository()

        template = repository.template_from_string("Hello {{name}}!")

        assert template.render(name="World") == "Hello World!"
        assert template.template_id is None

    def test_partial_without_data_source_raises_not_found(self) -> None:
        repository = TemplateRepository()

        with pytest.raises(TemplateNotFoundError) as exc_info:
            _ = repository.template_from_string("{{>partial}}")

        assert exc_info.value.name == "partial"

    def test_named_lookup_without_data_source_raises_not_found(self) -> None:
        with pytest.raises(TemplateNotFoundError):
            _ = TemplateRepository().template_named("foo")

    def test_partials_resolve_with_no_base_id(
        self, repository: TemplateRepository, source: FakeDataSource
    ) -> None:
        _ = repository.template_from_string("{{>b}}")

        assert source.id_calls == [("b", None)]

    def test_string_itself_is_not_cached(self, repository: TemplateRepository) -> None:
        first = repository.template_from_string("{{>b}}")
        second = repository.template_from_string("{{>b}}")

        assert first is not second
        assert first.partials[0] is second.partials[0]

    def test_data_source_can_be_assigned_later(self) -> None:
        repository = TemplateRepository()
        repository.data_source = FakeDataSource({"partial": "It works."})

        assert repository.template_from_string("{{>partial}}").render() == "It works."


# =============================================================================
# Lookup Failures
# =============================================================================


class TestLookupFailures:
    def test_foreign_lookup_error_becomes_backend_error(self) -> None:
        source = FakeDataSource({"a": "a"})
        cause = OSError("index unavailable")
        source.fail_lookup("a", cause)
        repository = TemplateRepository(source)

        with pytest.raises(BackendError) as exc_info:
            _ = repository.template_named("a")

        error = exc_info.value
        assert error.name == "a"
        assert error.cause is cause
        assert error.template_id is None
        assert source.content_calls == []

    def test_lookup_error_in_partial_carries_trail(self) -> None:
        source = FakeDataSource({"a": "{{>b}}", "b": "b"})
        source.fail_lookup("b", ValueError("bad name"))
        repository = TemplateRepository(source)

        with pytest.raises(BackendError) as exc_info:
            _ = repository.template_named("a")

        assert exc_info.value.name == "b"
        assert exc_info.value.trail == (source.id_of("a"),)
        assert repository.is_resolving is False
        assert repository.cached_template_ids == frozenset()

    def test_template_error_from_lookup_propagates_unchanged(self) -> None:
        source = FakeDataSource({"a": "a"})
        raised = TemplateNotFoundError("gone", name="a")
        source.fail_lookup("a", raised)
        repository = TemplateRepository(source)

        with pytest.raises(TemplateNotFoundError) as exc_info:
            _ = repository.template_named("a")

        assert exc_info.value is raised

    def test_lookup_error_from_template_string(self) -> None:
        source = FakeDataSource({"b": "b"})
        source.fail_lookup("b", RuntimeError("offline"))
        repository = TemplateRepository(source)

        with pytest.raises(BackendError) as exc_info:
            _ = repository.template_from_string("{{>b}}")

        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_retry_after_lookup_recovers(self) -> None:
        source = FakeDataSource({"a": "ok"})
        source.fail_lookup("a", OSError("flaky"))
        repository = TemplateRepository(source)
        with pytest.raises(BackendError):
            _ = repository.template_named("a")

        source.lookup_failures.clear()

        assert repository.template_named("a").render() == "ok"


# =============================================================================
# End to End
# =============================================================================


class TestEndToEnd:
    def test_cached_template_survives_source_failure(
        self, repository: TemplateRepository, source: FakeDataSource
    ) -> None:
        first = repository.template_named("a")
        assert first.render() == "Hello World"

        source.fail("b", OSError("gone"))
        second = repository.template_named("a")

        assert second is first
        assert second.render() == "Hello World"

    def test_swapped_source_is_used_for_new_names(
        self, repository: TemplateRepository
    ) -> None:
        _ = repository.template_named("a")
        repository.data_source = FakeDataSource({"c": "new"})

        assert repository.template_named("c").render() == "new"


# =============================================================================
# Compiler Collaboration
# =============================================================================


class _RecordingCompiler:
    """Compiler stub resolving every word of the text as a partial name."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Hashable | None]] = []

    def compile(
        self, text: str, resolver: PartialResolver, base_id: Hashable | None
    ) -> Template:
        self.calls.append((text, base_id))
        for name in text.split():
            _ = resolver.resolve(name, base_id)
        return Template(nodes=(TextNode(text),), template_id=base_id)


class TestCompilerCollaboration:
    def test_compiler_receives_text_and_id(self) -> None:
        source = FakeDataSource({"a": "", "b": "a"})
        compiler = _RecordingCompiler()
        repository = TemplateRepository(source, compiler=compiler)

        _ = repository.template_named("b")

        assert compiler.calls == [("a", "id:b"), ("", "id:a")]

    def test_compiler_errors_gain_frames(self) -> None:
        class Failing:
            def compile(
                self, text: str, resolver: PartialResolver, base_id: Hashable | None
            ) -> Template:
                raise TemplateError("boom", template_id=base_id)

        source = FakeDataSource({"a": "a"})
        repository = TemplateRepository(source, compiler=Failing())

        with pytest.raises(TemplateError) as exc_info:
            _ = repository.template_named("a")

        assert exc_info.value.trail == ("id:a",)
        assert repository.is_resolving is False

    def test_repository_satisfies_partial_resolver(
        self, repository: TemplateRepository
    ) -> None:
        assert isinstance(repository, PartialResolver)

    def test_default_compiler_runs_once_per_template(
        self, repository: TemplateRepository, mocker: MockerFixture
    ) -> None:
        compile_spy = mocker.spy(MustacheCompiler, "compile")

        _ = repository.template_named("a")
        _ = repository.template_named("a")
        _ = repository.template_named("b")

        assert compile_spy.call_count == 2

    def test_foreign_compiler_error_becomes_parse_error(self) -> None:
        cause = ValueError("bad")

        class Failing:
            def compile(
                self, text: str, resolver: PartialResolver, base_id: Hashable | None
            ) -> Template:
                raise cause

        source = FakeDataSource({"a": "a"})
        repository = TemplateRepository(source, compiler=Failing())

        with pytest.raises(TemplateParseError) as exc_info:
            _ = repository.template_named("a")

        error = exc_info.value
        assert error.cause is cause
        assert error.template_id == "id:a"
        assert error.trail == ("id:a",)
        assert repository.is_resolving is False
        assert repository.cached_template_ids == frozenset()

    def test_foreign_compiler_error_from_template_string(self) -> None:
        class Failing:
            def compile(
                self, text: str, resolver: PartialResolver, base_id: Hashable | None
            ) -> Template:
                raise KeyError(text)

        repository = TemplateRepository(compiler=Failing())

        with pytest.raises(TemplateParseError) as exc_info:
            _ = repository.template_from_string("x")

        assert exc_info.value.template_id is None
        assert isinstance(exc_info.value.cause, KeyError)
