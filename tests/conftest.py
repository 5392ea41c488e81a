"""
In-memory stand-ins for a Playwright page realm.

Page-side functions are JavaScript source strings, so the fake realm maps each
source string to a Python callable that receives the unwrapped scope value and
argument. Nodes form a tiny DOM with enough CSS (#id, .class, tag) to back the
default handler.
"""

import time
from typing import Any, Callable, Dict, List, Optional

import pytest

from query_handlers.dom import scripts
from query_handlers.handlers.handler import DEFAULT_HANDLER
from query_handlers.handlers.registry import QueryHandlerRegistry
from query_handlers.utils.config import Settings


class FakeNode:
    def __init__(self, tag: str = "div", id: str = "", classes=(), text: str = "", children=()):
        self.tag = tag
        self.id = id
        self.classes = list(classes)
        self.text = text
        self.visible = True
        self.connected = True
        self.children: List["FakeNode"] = []
        for child in children:
            self.append(child)

    def __repr__(self) -> str:
        return f"<{self.tag} id={self.id!r} class={' '.join(self.classes)!r}>"

    def append(self, child: "FakeNode") -> "FakeNode":
        self.children.append(child)
        return child

    def remove(self, child: "FakeNode") -> None:
        self.children.remove(child)
        child.connected = False

    def descendants(self):
        for child in self.children:
            yield child
            yield from child.descendants()

    def matches(self, css: str) -> bool:
        if css.startswith("#"):
            return self.id == css[1:]
        if css.startswith("."):
            return css[1:] in self.classes
        return self.tag == css

    def query_selector(self, css: str) -> Optional["FakeNode"]:
        return next((n for n in self.descendants() if n.matches(css)), None)

    def query_selector_all(self, css: str) -> List["FakeNode"]:
        return [n for n in self.descendants() if n.matches(css)]


class FakeJSHandle:
    def __init__(self, realm: "FakeRealm", value: Any):
        self.realm = realm
        self.value = value
        self.disposed = False

    def as_element(self):
        return None

    def get_properties(self) -> Dict[str, "FakeJSHandle"]:
        props = {str(i): self.realm.wrap(v) for i, v in enumerate(self.value)}
        props["length"] = self.realm.wrap(len(self.value))
        return props

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        return self.realm.run(expression, self.value, arg)

    def evaluate_handle(self, expression: str, arg: Any = None) -> "FakeJSHandle":
        return self.realm.wrap(self.realm.run(expression, self.value, arg))

    def dispose(self) -> None:
        self.disposed = True


class FakeElementHandle(FakeJSHandle):
    def as_element(self):
        return self

    def owner_frame(self):
        return self.realm.frame


class FakeFrame:
    """Frame whose `document` is the realm's root node. Sleeping runs hooks."""

    def __init__(self, realm: "FakeRealm"):
        self.realm = realm
        self.sleeps: List[int] = []
        self.on_sleep: List[Callable[[int], None]] = []

    def evaluate_handle(self, expression: str, arg: Any = None) -> FakeJSHandle:
        return self.realm.wrap(self.realm.run(expression, None, arg))

    def wait_for_timeout(self, ms: int) -> None:
        self.sleeps.append(ms)
        for hook in list(self.on_sleep):
            hook(len(self.sleeps))
        time.sleep(ms / 1000.0)


class FakeRealm:
    def __init__(self):
        self.document = FakeNode("#document")
        self.frame = FakeFrame(self)
        self.handles: List[FakeJSHandle] = []
        self._functions: Dict[str, Callable[[Any, Any], Any]] = {}

        self.define(scripts.DOCUMENT, lambda _scope, _arg: self.document)
        self.define(DEFAULT_HANDLER.query_one, lambda scope, sel: scope.query_selector(sel))
        self.define(DEFAULT_HANDLER.query_all, lambda scope, sel: scope.query_selector_all(sel))
        self.define(scripts.IS_VISIBLE, lambda node, _arg: node.visible)

    def define(self, source: str, fn: Callable[[Any, Any], Any]) -> None:
        self._functions[source.strip()] = fn

    def define_all(self, expression: str, fn: Callable[[List[Any], Any], Any]) -> None:
        """Register an `(elements, arg) => ...` expression for eval_on_selector_all."""
        self.define(scripts.with_elements(expression), lambda _scope, packed: fn(packed[0], packed[1]))

    def wrap(self, value: Any) -> FakeJSHandle:
        cls = FakeElementHandle if isinstance(value, FakeNode) else FakeJSHandle
        handle = cls(self, value)
        self.handles.append(handle)
        return handle

    def run(self, source: str, scope: Any, arg: Any) -> Any:
        try:
            fn = self._functions[source.strip()]
        except KeyError:
            raise AssertionError(f"no fake registered for page function: {source!r}") from None
        return fn(scope, self._unwrap(arg))

    def _unwrap(self, arg: Any) -> Any:
        if isinstance(arg, FakeJSHandle):
            return arg.value
        if isinstance(arg, list):
            return [self._unwrap(a) for a in arg]
        return arg

    def element_handles(self) -> List[FakeElementHandle]:
        return [h for h in self.handles if isinstance(h, FakeElementHandle)]


@pytest.fixture
def realm() -> FakeRealm:
    return FakeRealm()


@pytest.fixture
def node():
    """Factory for fake DOM nodes."""
    return FakeNode


@pytest.fixture
def registry() -> QueryHandlerRegistry:
    return QueryHandlerRegistry()


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.chdir(tmp_path)
    return Settings(WAIT_FOR_SELECTOR_TIMEOUT_MS=500, WAIT_FOR_SELECTOR_POLL_MS=5)
