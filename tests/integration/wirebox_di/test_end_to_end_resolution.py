"""End-to-end integration tests for dependency resolution across all layers."""

import pytest

from wirebox_di import CyclicDependencyError, Lifecycle, ServiceContainer, ServiceNotFoundError


class TestDependencyGraph:
    """Test resolving a shared dependency under each lifecycle."""

    @pytest.fixture
    def graph(self):
        """Register a -> (b, c) -> d with a switchable lifecycle for d."""
        settings = {"lifecycle": None}

        class ClassA:
            provides = "a"
            requires = ["b", "c"]

            def __init__(self, b, c):
                self.b = b
                self.c = c

        class ClassB:
            provides = "b"
            requires = ["d"]

            def __init__(self, d):
                self.d = d

        class ClassC:
            provides = "c"
            requires = ["d"]

            def __init__(self, d):
                self.d = d

        def make_d():
            class ClassD:
                provides = "d"

            if settings["lifecycle"] is not None:
                ClassD.lifecycle = settings["lifecycle"]
            return ClassD

        container = ServiceContainer()
        container.register_class(ClassA)
        container.register_class(ClassB)
        container.register_class(ClassC)

        def register_d(lifecycle=None):
            settings["lifecycle"] = lifecycle
            container.register_class(make_d())

        return container, register_d

    def test_missing_dependency_fails_until_registered(self, graph):
        """Test that a missing leaf fails the whole graph."""
        container, register_d = graph

        with pytest.raises(ServiceNotFoundError):
            container.get("a")

        register_d()

        assert container.get("a").b.d is not None

    def test_per_request_shared_within_call(self, graph):
        """Test that perRequest siblings share one instance within a call only."""
        container, register_d = graph
        register_d()

        first = container.get("a")
        second = container.get("a")

        assert first is not second
        assert first.b.d is first.c.d
        assert first.b.d is not second.b.d

    def test_singleton_shared_across_calls(self, graph):
        """Test that a singleton is shared across calls and with direct lookups."""
        container, register_d = graph
        register_d(Lifecycle.SINGLETON)

        first = container.get("a")
        second = container.get("a")

        assert first is not second
        assert first.b.d is first.c.d
        assert first.b.d is second.b.d
        assert first.b.d is container.get("d")

    def test_unique_never_shared(self, graph):
        """Test that unique siblings get distinct instances."""
        container, register_d = graph
        register_d("unique")

        a = container.get("a")

        assert a.b.d is not a.c.d

    def test_instance_registration_is_shared(self, graph):
        """Test that an instance registered over the class is used everywhere."""
        container, register_d = graph
        register_d("unique")
        d = {"test": "value"}
        container.register_instance(d, "d")

        a = container.get("a")

        assert a.b.d is d
        assert a.c.d is d


class TestSingletonScenario:
    """Test the a -> b -> d(singleton) chain."""

    def test_singleton_leaf_shared_by_fresh_roots(self):
        """Test that fresh roots share the singleton leaf, also returned by direct get."""

        class ClassA:
            provides = "a"
            requires = ["b"]

            def __init__(self, b):
                self.b = b

        class ClassB:
            provides = "b"
            requires = ["d"]

            def __init__(self, d):
                self.d = d

        class ClassC:
            provides = "d"
            lifecycle = "singleton"

        container = ServiceContainer()
        for provider in (ClassA, ClassB, ClassC):
            container.register_class(provider)

        first = container.get("a")
        second = container.get("a")

        assert first is not second
        assert first.b.d is second.b.d
        assert container.get("d") is first.b.d


class TestCycles:
    """Test cycle detection and recovery."""

    @staticmethod
    def register_chain(container, back_edge):
        class ClassA:
            provides = "a"
            requires = ["b"]

            def __init__(self, b):
                self.b = b

        class ClassB:
            provides = "b"
            requires = ["c"]

            def __init__(self, c):
                self.c = c

        class ClassC:
            provides = "c"
            requires = [back_edge] if back_edge else []

            def __init__(self, *args):
                self.args = args

        for provider in (ClassA, ClassB, ClassC):
            container.register_class(provider)

    def test_direct_cycle(self):
        """Test a -> b -> a."""
        container = ServiceContainer()

        class ClassA:
            provides = "a"
            requires = ["b"]

        class ClassB:
            provides = "b"
            requires = ["a"]

        container.register_class(ClassA)
        container.register_class(ClassB)

        with pytest.raises(CyclicDependencyError) as exc_info:
            container.get("a")

        assert exc_info.value.chain == ["a", "b", "a"]

    @pytest.mark.parametrize("back_edge", ["a", "b"])
    def test_transitive_cycle_then_fixed(self, back_edge):
        """Test that removing the back edge makes the same call succeed."""
        container = ServiceContainer()
        self.register_chain(container, back_edge)

        with pytest.raises(CyclicDependencyError):
            container.get("a")

        self.register_chain(container, None)

        assert container.get("a").b.c.args == ()

    def test_cycle_error_does_not_poison_later_calls(self):
        """Test that a failed call leaves no in-progress state behind."""
        container = ServiceContainer()
        self.register_chain(container, None)

        class Looping:
            provides = "loop"
            requires = ["loop"]

        container.register_class(Looping)

        with pytest.raises(CyclicDependencyError):
            container.get("loop")

        assert container.get("a").b.c.args == ()


class TestOptionalLookups:
    """Test optional names across the graph."""

    def test_missing_and_optional(self):
        """Test mandatory and optional lookups of an unknown name."""
        container = ServiceContainer()

        with pytest.raises(ServiceNotFoundError):
            container.get("missing")

        assert container.get("missing?") is None

    def test_optional_dependency_filled_when_registered(self):
        """Test that an optional dependency is injected once available."""

        class Reporter:
            provides = "reporter"
            requires = ["logger?"]

            def __init__(self, logger):
                self.logger = logger

        container = ServiceContainer()
        container.register_class(Reporter)

        assert container.get("reporter").logger is None

        logger = object()
        container.register_instance(logger, "logger")

        assert container.get("reporter").logger is logger


class TestBootstrapPatterns:
    """Test how application bootstrap code uses the container."""

    def test_enumerate_modules_by_pattern(self):
        """Test resolving every top-level module found by search."""

        class UsersModule:
            provides = "modules.users"
            requires = ["container"]

            def __init__(self, container):
                self.container = container

        class BillingModule:
            provides = "modules.billing"

        class BillingTasks:
            provides = "modules.billing.tasks"

        container = ServiceContainer()
        for provider in (UsersModule, BillingModule, BillingTasks):
            container.register_class(provider)

        modules = {name: container.get(name) for name in container.search(r"^modules\.[^.]+$")}

        assert list(modules) == ["modules.users", "modules.billing"]
        assert modules["modules.users"].container is container

    def test_hot_swap_implementation(self):
        """Test replacing a service implementation while running."""

        class SlowCache:
            provides = "cache"

        class FastCache:
            provides = "cache"

        container = ServiceContainer()
        container.register_class(SlowCache)
        assert isinstance(container.get("cache"), SlowCache)

        container.register_class(FastCache)

        assert isinstance(container.get("cache"), FastCache)
