# query_handlers/handlers/aria.py
from __future__ import annotations

"""Accessible name / role handler
---------------------------------
Selector syntax after the `aria/` prefix is `<name>&<role>`:

    aria/Submit&button   name "Submit" and role "button"
    aria/&button         any element with role "button"
    aria/menu div        any element named "menu div"

Names are compared after collapsing whitespace. Elements hidden from the
accessibility tree never match. The walk descends into open shadow roots.
"""

from query_handlers.handlers.handler import QueryHandler
from query_handlers.handlers.registry import QueryHandlerRegistry
from query_handlers.utils.logger import get_logger

log = get_logger(__name__)

ARIA_HANDLER_NAME = "aria"

# Shared page-side helpers. Every handler function must be self-contained,
# so this body is inlined into both query_one and query_all.
_ARIA_PRELUDE = r"""
  const normalize = (value) => String(value || '').replace(/\s+/g, ' ').trim();
  const amp = selector.indexOf('&');
  const wantedName = normalize(amp === -1 ? selector : selector.slice(0, amp));
  const wantedRole = amp === -1 ? '' : normalize(selector.slice(amp + 1)).toLowerCase();

  const INPUT_ROLES = {
    button: 'button', submit: 'button', reset: 'button', image: 'button',
    checkbox: 'checkbox', radio: 'radio', range: 'slider',
    number: 'spinbutton', search: 'searchbox',
    email: 'textbox', tel: 'textbox', text: 'textbox', url: 'textbox', '': 'textbox',
  };
  const IMPLICIT_ROLES = {
    a: (el) => (el.hasAttribute('href') ? 'link' : ''),
    area: (el) => (el.hasAttribute('href') ? 'link' : ''),
    article: 'article', aside: 'complementary', button: 'button',
    dialog: 'dialog', dd: 'definition', details: 'group', dt: 'term',
    fieldset: 'group', figure: 'figure', footer: 'contentinfo', form: 'form',
    h1: 'heading', h2: 'heading', h3: 'heading', h4: 'heading', h5: 'heading', h6: 'heading',
    header: 'banner', hr: 'separator',
    img: (el) => (el.getAttribute('alt') === '' ? 'presentation' : 'img'),
    input: (el) => {
      const type = (el.getAttribute('type') || '').toLowerCase();
      if (el.hasAttribute('list') && INPUT_ROLES[type] === 'textbox') return 'combobox';
      return INPUT_ROLES[type] || '';
    },
    li: 'listitem', main: 'main', menu: 'list', meter: 'meter', nav: 'navigation',
    ol: 'list', optgroup: 'group', option: 'option', output: 'status',
    progress: 'progressbar', section: 'region',
    select: (el) => (el.multiple || el.size > 1 ? 'listbox' : 'combobox'),
    summary: 'button', table: 'table', tbody: 'rowgroup', td: 'cell',
    textarea: 'textbox', tfoot: 'rowgroup', th: 'columnheader', thead: 'rowgroup',
    tr: 'row', ul: 'list',
  };
  const NAME_FROM_CONTENT = new Set([
    'button', 'cell', 'checkbox', 'columnheader', 'gridcell', 'heading', 'link',
    'menuitem', 'menuitemcheckbox', 'menuitemradio', 'option', 'radio', 'row',
    'rowheader', 'switch', 'tab', 'tooltip', 'treeitem',
  ]);

  const roleOf = (el) => {
    const explicit = normalize(el.getAttribute('role')).split(' ')[0];
    if (explicit) return explicit.toLowerCase();
    const implicit = IMPLICIT_ROLES[el.localName];
    if (!implicit) return '';
    return typeof implicit === 'function' ? implicit(el) : implicit;
  };

  const nameOf = (el, role) => {
    const labelledBy = normalize(el.getAttribute('aria-labelledby'));
    if (labelledBy) {
      const root = el.getRootNode();
      const text = labelledBy
        .split(' ')
        .map((id) => (root.getElementById ? root.getElementById(id) : document.getElementById(id)))
        .filter(Boolean)
        .map((target) => normalize(target.textContent))
        .join(' ');
      if (normalize(text)) return normalize(text);
    }
    const label = normalize(el.getAttribute('aria-label'));
    if (label) return label;
    if (el.labels && el.labels.length) {
      const text = normalize(Array.from(el.labels).map((l) => l.textContent).join(' '));
      if (text) return text;
    }
    const tag = el.localName;
    if ((tag === 'img' || tag === 'area' || (tag === 'input' && el.type === 'image')) && el.hasAttribute('alt')) {
      return normalize(el.getAttribute('alt'));
    }
    if (tag === 'input' && ['button', 'submit', 'reset'].includes(el.type)) {
      const value = normalize(el.value);
      if (value) return value;
      if (el.type === 'submit') return 'Submit';
      if (el.type === 'reset') return 'Reset';
    }
    if (NAME_FROM_CONTENT.has(role)) {
      const text = normalize(el.textContent);
      if (text) return text;
    }
    return normalize(el.getAttribute('title') || el.getAttribute('placeholder'));
  };

  // Parent in the flat tree: crosses from a shadow root to its host.
  const flatParent = (el) => el.parentElement || (el.parentNode && el.parentNode.host) || null;

  const isHidden = (el) => {
    for (let cur = el; cur; cur = flatParent(cur)) {
      if (cur.getAttribute('aria-hidden') === 'true') return true;
    }
    // Options of a collapsed <select> have no boxes but are still exposed.
    if (el.localName === 'option' || el.localName === 'optgroup') {
      const select = el.closest('select');
      if (select) return isHidden(select);
    }
    const style = window.getComputedStyle(el);
    if (style.visibility === 'hidden' || style.visibility === 'collapse') return true;
    for (let cur = el; cur; cur = flatParent(cur)) {
      if (window.getComputedStyle(cur).display === 'none') return true;
    }
    return false;
  };

  const matches = (el) => {
    const role = roleOf(el);
    if (wantedRole && role !== wantedRole) return false;
    if (wantedName && nameOf(el, role) !== wantedName) return false;
    return !isHidden(el);
  };

  // Pre-order walk over the light tree and open shadow trees.
  const search = (root, firstOnly) => {
    const found = [];
    if (!wantedName && !wantedRole) return found;
    const stack = [];
    const pushChildren = (node) => {
      const kids = [];
      if (node.shadowRoot) kids.push(...node.shadowRoot.children);
      kids.push(...node.children);
      for (let i = kids.length - 1; i >= 0; i--) stack.push(kids[i]);
    };
    pushChildren(root);
    while (stack.length) {
      const el = stack.pop();
      if (matches(el)) {
        found.push(el);
        if (firstOnly) break;
      }
      pushChildren(el);
    }
    return found;
  };
"""

ARIA_QUERY_HANDLER = QueryHandler(
    query_one="(scope, selector) => {" + _ARIA_PRELUDE + "  return search(scope, true)[0] || null;\n}",
    query_all="(scope, selector) => {" + _ARIA_PRELUDE + "  return search(scope, false);\n}",
)


def register_builtin_handlers(registry: QueryHandlerRegistry) -> QueryHandlerRegistry:
    """Register the built-in handlers (currently `aria`) unless already present."""
    if ARIA_HANDLER_NAME not in registry:
        registry.register(ARIA_HANDLER_NAME, ARIA_QUERY_HANDLER)
        log.debug("Registered built-in aria query handler")
    return registry
