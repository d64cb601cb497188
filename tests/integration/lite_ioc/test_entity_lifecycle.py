"""Integration tests for entity construction and lifecycle across layers."""

import logging
import threading

import pytest

from lite_ioc import (
    ApplicationContainer,
    CircularConstructorDependency,
    CircularPrototypeDependency,
    ConstructionFailure,
    EntityDefinition,
    EntityPostProcessor,
    EntityReference,
    InstanceState,
    LifecycleHookFailure,
    LiteralValue,
    Scope,
)


def ref(name):
    return EntityReference(entity_name=name)


class CustomInitDestroyBean:
    def __init__(self):
        self.initialized = False
        self.destroyed = False

    def my_init(self):
        self.initialized = True

    def my_destroy(self):
        self.destroyed = True


class TestCustomInitDestroy:
    """Test custom init and destroy methods named in the definition."""

    def test_custom_init_method(self):
        """Test that the init method runs before the entity is handed out."""
        container = ApplicationContainer()
        container.register(
            "customBean",
            EntityDefinition(
                target_type=CustomInitDestroyBean,
                init_method_name="my_init",
                destroy_method_name="my_destroy",
            ),
        )

        bean = container.resolve("customBean", CustomInitDestroyBean)

        assert bean.initialized

    def test_custom_destroy_method(self):
        """Test that the destroy method runs when the container closes."""
        container = ApplicationContainer()
        container.register(
            "customBean",
            EntityDefinition(
                target_type=CustomInitDestroyBean,
                init_method_name="my_init",
                destroy_method_name="my_destroy",
            ),
        )
        bean = container.resolve("customBean", CustomInitDestroyBean)
        assert not bean.destroyed

        container.close()

        assert bean.destroyed
        assert container.get_instance_state("customBean") == InstanceState.DESTROYED


class TestFullLifecycle:
    """Test the complete callback sequence of one entity."""

    def test_callback_sequence(self):
        """Test that every callback runs exactly once, in order."""
        events = []

        class Dependency:
            pass

        class LifecycleBean:
            def __init__(self):
                events.append("constructor")
                self._dependency = None

            @property
            def dependency(self):
                return self._dependency

            @dependency.setter
            def dependency(self, value):
                events.append("property")
                self._dependency = value

            def set_entity_name(self, name):
                events.append(f"name:{name}")

            def set_container(self, container):
                events.append("container")

            def after_properties_set(self):
                events.append("after_properties_set")

            def custom_init(self):
                events.append("custom_init")

            def destroy(self):
                events.append("destroy")

            def custom_destroy(self):
                events.append("custom_destroy")

        class Logging(EntityPostProcessor):
            def before_initialization(self, instance, name):
                if name == "lifecycle":
                    events.append("before")
                return instance

            def after_initialization(self, instance, name):
                if name == "lifecycle":
                    events.append("after")
                return instance

        container = ApplicationContainer()
        container.add_processor(Logging())
        container.register("dependency", EntityDefinition(target_type=Dependency))
        container.register(
            "lifecycle",
            EntityDefinition(
                target_type=LifecycleBean,
                init_method_name="custom_init",
                destroy_method_name="custom_destroy",
                property_bindings={"dependency": ref("dependency")},
            ),
        )

        container.resolve("lifecycle")
        container.close()

        assert events == [
            "constructor",
            "property",
            "name:lifecycle",
            "container",
            "before",
            "after_properties_set",
            "custom_init",
            "after",
            "destroy",
            "custom_destroy",
        ]


class TestScopes:
    """Test singleton and prototype scopes end to end."""

    def test_singleton_shared_by_dependents(self):
        """Test that two dependents receive the same singleton."""

        class Repository:
            pass

        class Service:
            def __init__(self, repository):
                self.repository = repository

        container = ApplicationContainer()
        container.register("repository", EntityDefinition(target_type=Repository))
        for name in ("first", "second"):
            container.register(
                name,
                EntityDefinition(target_type=Service, constructor_arguments=[ref("repository")]),
            )

        assert container.resolve("first").repository is container.resolve("second").repository

    def test_prototype_not_tracked_for_teardown(self):
        """Test that prototypes are never destroyed by the container."""
        destroyed = []

        class Session:
            def destroy(self):
                destroyed.append(self)

        container = ApplicationContainer()
        container.register("session", EntityDefinition(target_type=Session, scope=Scope.PROTOTYPE))
        container.resolve("session")
        container.resolve("session")

        container.close()

        assert destroyed == []

    def test_concurrent_singleton_resolution(self):
        """Test that concurrent first resolutions build the singleton once."""
        constructed = []
        barrier = threading.Barrier(8)

        class Expensive:
            def __init__(self):
                constructed.append(self)

        container = ApplicationContainer()
        container.register("expensive", EntityDefinition(target_type=Expensive))
        results = []

        def worker():
            barrier.wait()
            results.append(container.resolve("expensive"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(constructed) == 1
        assert all(result is constructed[0] for result in results)


class TestCircularReferences:
    """Test cycle handling end to end."""

    def test_property_cycle(self):
        """Test that a property cycle between singletons resolves to fully wired instances."""

        class CircularA:
            def __init__(self):
                self.b = None

        class CircularB:
            def __init__(self):
                self.a = None

        container = ApplicationContainer()
        container.register("a", EntityDefinition(target_type=CircularA, property_bindings={"b": ref("b")}))
        container.register("b", EntityDefinition(target_type=CircularB, property_bindings={"a": ref("a")}))

        a = container.resolve("a")

        assert a.b.a is a
        assert container.resolve("a") is a

    def test_property_cycle_recovers_after_failure(self):
        """Test that a failed cycle member leaves no peer holding its half-built instance."""
        attempts = []

        class CircularA:
            def __init__(self):
                self.b = None

            def start(self):
                attempts.append(self)
                if len(attempts) == 1:
                    raise RuntimeError("not ready yet")

        class CircularB:
            def __init__(self):
                self.a = None

        container = ApplicationContainer()
        container.register(
            "a", EntityDefinition(target_type=CircularA, init_method_name="start", property_bindings={"b": ref("b")})
        )
        container.register("b", EntityDefinition(target_type=CircularB, property_bindings={"a": ref("a")}))

        with pytest.raises(LifecycleHookFailure):
            container.resolve("a")
        assert container.get_instance_state("b") == InstanceState.NOT_CREATED

        a = container.resolve("a")
        b = container.resolve("b")

        assert a.b.a is a
        assert b.a.b is b
        assert a is not attempts[0]

    def test_constructor_cycle(self):
        """Test that a constructor cycle fails and leaves nothing cached."""

        class CircularA:
            def __init__(self, b):
                self.b = b

        class CircularB:
            def __init__(self, a):
                self.a = a

        container = ApplicationContainer()
        container.register("a", EntityDefinition(target_type=CircularA, constructor_arguments=[ref("b")]))
        container.register("b", EntityDefinition(target_type=CircularB, constructor_arguments=[ref("a")]))

        with pytest.raises(CircularConstructorDependency) as exc_info:
            container.resolve("a")

        assert exc_info.value.entity_name == "a"
        assert "while creating entity 'b'" in exc_info.value.__notes__
        assert container.get_instance_state("a") == InstanceState.NOT_CREATED
        assert container.get_instance_state("b") == InstanceState.NOT_CREATED

    def test_constructor_and_property_mix(self):
        """Test that a cycle closed through a property of an exposed singleton resolves."""

        class Owner:
            def __init__(self):
                self.helper = None

        class Helper:
            def __init__(self, owner):
                self.owner = owner

        container = ApplicationContainer()
        container.register(
            "owner", EntityDefinition(target_type=Owner, property_bindings={"helper": ref("helper")})
        )
        container.register(
            "helper", EntityDefinition(target_type=Helper, constructor_arguments=[ref("owner")])
        )

        owner = container.resolve("owner")

        assert owner.helper.owner is owner

    def test_prototype_self_cycle_fails_every_time(self):
        """Test that a prototype referencing itself fails on every resolution."""

        class Node:
            def __init__(self):
                self.next = None

        container = ApplicationContainer()
        container.register(
            "node",
            EntityDefinition(
                target_type=Node, scope=Scope.PROTOTYPE, property_bindings={"next": ref("node")}
            ),
        )

        for _ in range(3):
            with pytest.raises(CircularPrototypeDependency) as exc_info:
                container.resolve("node")
            assert exc_info.value.dependency_chain == ["node", "node"]

    def test_singleton_prototype_cycle(self):
        """Test that a prototype may reference the singleton that references it."""

        class Parent:
            def __init__(self):
                self.child = None

        class Child:
            def __init__(self):
                self.parent = None

        container = ApplicationContainer()
        container.register(
            "parent", EntityDefinition(target_type=Parent, property_bindings={"child": ref("child")})
        )
        container.register(
            "child",
            EntityDefinition(
                target_type=Child, scope=Scope.PROTOTYPE, property_bindings={"parent": ref("parent")}
            ),
        )

        parent = container.resolve("parent")

        assert parent.child.parent is parent
        assert container.resolve("child") is not parent.child


class TestPostProcessorSubstitution:
    """Test processors replacing instances."""

    def test_substitute_is_stable(self):
        """Test that the substituted instance is cached and injected everywhere."""

        class Service:
            pass

        class Decorated:
            def __init__(self, inner):
                self.inner = inner

        class Consumer:
            def __init__(self, service):
                self.service = service

        class Decorating(EntityPostProcessor):
            def after_initialization(self, instance, name):
                if name == "service":
                    return Decorated(instance)
                return instance

        container = ApplicationContainer()
        container.add_processor(Decorating())
        container.register("service", EntityDefinition(target_type=Service))
        container.register(
            "consumer", EntityDefinition(target_type=Consumer, constructor_arguments=[ref("service")])
        )

        service = container.resolve("service")

        assert isinstance(service, Decorated)
        assert container.resolve("service") is service
        assert container.resolve("consumer").service is service

    def test_disposable_substitute_destroyed_on_close(self):
        """Test that closing the container destroys the substitute a processor returned."""
        destroyed = []

        class Connection:
            pass

        class Pooled:
            def __init__(self, inner):
                self.inner = inner

            def destroy(self):
                destroyed.append(self)

        class Pooling(EntityPostProcessor):
            def after_initialization(self, instance, name):
                return Pooled(instance) if isinstance(instance, Connection) else instance

        container = ApplicationContainer()
        container.add_processor(Pooling())
        container.register("connection", EntityDefinition(target_type=Connection))
        pooled = container.resolve("connection")

        container.close()

        assert destroyed == [pooled]
        assert container.teardown_failures == []


class TestTeardown:
    """Test container teardown."""

    def test_reverse_order_and_best_effort(self, caplog):
        """Test that teardown runs in reverse order and survives failures."""
        destroyed = []

        class Resource:
            def set_entity_name(self, name):
                self.name = name

            def destroy(self):
                destroyed.append(self.name)
                if self.name == "cache":
                    raise OSError("socket closed")

        container = ApplicationContainer()
        for name in ("database", "cache", "web"):
            container.register(name, EntityDefinition(target_type=Resource))
        container.refresh()

        with caplog.at_level(logging.WARNING):
            container.close()

        assert destroyed == ["web", "cache", "database"]
        assert [failure.entity_name for failure in container.teardown_failures] == ["cache"]
        assert "1 destroy failure(s)" in caplog.text


class TestConfiguredDefinitions:
    """Test definitions as they come from configuration."""

    def test_dotted_type_path_with_literals(self):
        """Test building a library class from its import path and a literal."""
        container = ApplicationContainer()
        container.register("appLogger", EntityDefinition(target_type="logging.Logger", constructor_arguments=["app"]))

        logger = container.resolve("appLogger", logging.Logger)

        assert logger.name == "app"

    def test_property_binding_on_library_class(self):
        """Test binding properties of a class loaded by path."""
        container = ApplicationContainer()
        container.register(
            "pointcut",
            EntityDefinition(
                target_type="lite_ioc.application.aop.pointcuts.NameMatchPointcut",
                property_bindings={"method_names": ["save", "find_*"]},
            ),
        )

        assert container.resolve("pointcut").method_names == ["save", "find_*"]

    def test_typed_literals(self):
        """Test that literals with a type hint are converted."""

        class Settings:
            def __init__(self):
                self.port = None
                self.debug = None

        container = ApplicationContainer()
        container.register(
            "settings",
            EntityDefinition(
                target_type=Settings,
                property_bindings={
                    "port": LiteralValue(value="8080", type_hint=int),
                    "debug": LiteralValue(value="off", type_hint=bool),
                },
            ),
        )

        settings = container.resolve("settings")

        assert settings.port == 8080
        assert settings.debug is False

    def test_bad_literal_fails_construction(self):
        """Test that an unconvertible literal fails the entity."""

        class Server:
            port: int = 0

        container = ApplicationContainer()
        container.register("server", EntityDefinition(target_type=Server, property_bindings={"port": "eighty"}))

        with pytest.raises(ConstructionFailure):
            container.resolve("server")
