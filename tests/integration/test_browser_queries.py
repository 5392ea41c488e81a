import pytest

from query_handlers import (
    ElementNotFoundError,
    HandlerNotFoundError,
    NodeDetachedError,
    NodeNotVisibleError,
    PageQueries,
    QueryHandlerRegistry,
    WaitTimeoutError,
    register_builtin_handlers,
)
from query_handlers.utils.config import Settings

pytestmark = pytest.mark.integration

HTML = """
<!doctype html>
<html><body style="margin:0">
  <div id="foo" class="foo" style="width:100px;height:40px">first</div>
  <div class="foo bar">second</div>
  <button id="go" style="position:absolute;left:200px;top:10px;width:80px;height:30px;box-sizing:border-box"
          onclick="window.clicks = (window.clicks || 0) + 1">Submit  form</button>
  <a href="#next">Next page</a>
  <label for="q">Search term</label><input id="q" type="text">
  <div aria-hidden="true"><button>Hidden</button></div>
  <div id="host"></div>
  <div id="masked" aria-hidden="true"></div>
  <select id="colour"><option>Red</option><option>Blue</option></select>
  <p id="invisible" style="display:none">gone</p>
  <script>
    const root = document.getElementById('host').attachShadow({ mode: 'open' });
    root.innerHTML = '<span class="foo">shadow</span><button>Inner</button>';
    document.getElementById('masked').attachShadow({ mode: 'open' }).innerHTML = '<button>Masked</button>';
  </script>
</body></html>
"""

PIERCE = """
(scope, selector) => {
  const out = [];
  const walk = (root) => {
    for (const el of root.querySelectorAll('*')) {
      if (el.matches(selector)) out.push(el);
      if (el.shadowRoot) walk(el.shadowRoot);
    }
  };
  walk(scope);
  return out;
}
"""


@pytest.fixture(scope="module")
def browser():
    sync_api = pytest.importorskip("playwright.sync_api")
    with sync_api.sync_playwright() as p:
        try:
            b = p.chromium.launch(headless=True)
        except Exception as e:  # browser binaries missing in this environment
            pytest.skip(f"Chromium unavailable: {e}")
        yield b
        b.close()


@pytest.fixture
def registry():
    reg = QueryHandlerRegistry()
    register_builtin_handlers(reg)
    reg.register("getById", {"query_one": "(el, id) => el.querySelector(`#${id}`)"})
    reg.register("getByClass", {"query_all": "(el, c) => el.querySelectorAll(`.${c}`)"})
    reg.register("pierce", {"query_all": PIERCE})
    return reg


@pytest.fixture
def page(browser):
    context = browser.new_context(viewport={"width": 800, "height": 600})
    pg = context.new_page()
    pg.set_content(HTML)
    yield pg
    context.close()


@pytest.fixture
def queries(page, registry, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return PageQueries(page, registry, settings=Settings(WAIT_FOR_SELECTOR_TIMEOUT_MS=2000))


def _text(element):
    return element.evaluate("(el) => el.textContent")


def test_custom_handlers_and_fallbacks(queries):
    assert _text(queries.query_selector("getById/foo")) == "first"
    assert [_text(e) for e in queries.query_selector_all("getById/foo")] == ["first"]
    assert [_text(e) for e in queries.query_selector_all("getByClass/foo")] == ["first", "second"]
    assert _text(queries.query_selector("getByClass/foo")) == "first"
    assert queries.query_selector("getByClass/none") is None


def test_css_and_unknown_prefix(queries):
    assert _text(queries.query_selector(".bar")) == "second"
    with pytest.raises(HandlerNotFoundError):
        queries.query_selector("nope/foo")


def test_pierce_handler_reaches_shadow_dom(queries):
    texts = [_text(e) for e in queries.query_selector_all("pierce/.foo")]
    assert texts == ["first", "second", "shadow"]


def test_aria_handler(queries):
    assert _text(queries.query_selector("aria/Submit form&button")) == "Submit  form"
    assert _text(queries.query_selector("aria/Next page")) == "Next page"
    assert queries.query_selector("aria/Search term&textbox").evaluate("(el) => el.id") == "q"
    # shadow content is searched, aria-hidden subtrees are not
    assert [_text(e) for e in queries.query_selector_all("aria/&button")] == ["Submit  form", "Inner"]
    assert queries.query_selector("aria/Hidden") is None
    assert queries.query_selector_all("aria/&") == []


def test_aria_hidden_host_hides_its_shadow_tree(queries):
    assert queries.query_selector("aria/Masked&button") is None
    assert queries.query_selector("aria/Masked") is None


def test_aria_matches_options_of_a_collapsed_select(queries):
    red = queries.query_selector("aria/Red&option")
    assert red is not None and _text(red) == "Red"
    assert [_text(e) for e in queries.query_selector_all("aria/&option")] == ["Red", "Blue"]


def test_eval_helpers(queries):
    assert queries.eval_on_selector("getById/foo", "(el, suffix) => el.id + suffix", "!") == "foo!"
    count = queries.eval_on_selector_all("getByClass/foo", "(els, n) => els.length * n", 10)
    assert count == 20
    with pytest.raises(ElementNotFoundError):
        queries.eval_on_selector("getById/missing", "(el) => el")


def test_element_geometry_and_click(page, queries):
    button = queries.query_selector("getById/go")
    box = button.bounding_box()
    assert (box.x, box.y, box.width, box.height) == (200, 10, 80, 30)
    assert button.box_model().border[0].x == 200
    assert button.is_intersecting_viewport()

    button.click()
    assert page.evaluate("window.clicks") == 1


def test_click_errors(queries):
    hidden = queries.query_selector("#invisible")
    assert hidden.bounding_box() is None
    with pytest.raises(NodeNotVisibleError):
        hidden.click()

    foo = queries.query_selector("getById/foo")
    foo.evaluate("(el) => el.remove()")
    with pytest.raises(NodeDetachedError):
        foo.hover()


def test_wait_for_selector(page, queries):
    page.evaluate(
        """() => setTimeout(() => {
             const el = document.createElement('div');
             el.id = 'late';
             el.textContent = 'late';
             document.body.appendChild(el);
           }, 200)"""
    )
    assert _text(queries.wait_for_selector("getById/late")) == "late"
    assert queries.wait_for_selector("#invisible", hidden=True) is None
    with pytest.raises(WaitTimeoutError):
        queries.wait_for_selector("getById/never", timeout_ms=300)


def test_wait_for_visible_text_node(queries, registry):
    first_text = "(el, id) => { const e = el.querySelector(`#${id}`); return e && e.firstChild; }"
    registry.register("firstText", {"query_one": first_text})

    node = queries.wait_for_selector("firstText/foo", visible=True, timeout_ms=500)
    assert node.evaluate("(n) => n.nodeType") == 3
    assert node.is_visible() is True
    with pytest.raises(WaitTimeoutError):
        queries.wait_for_selector("firstText/invisible", visible=True, timeout_ms=300)
