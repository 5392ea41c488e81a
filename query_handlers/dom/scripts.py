# query_handlers/dom/scripts.py
"""Page-side JavaScript used by the element and query layers."""

DOCUMENT = "document"

# Mirrors what a user perceives as "shown": rendered box and not visibility:hidden.
# A text node is judged by the element that renders it.
IS_VISIBLE = """
(node) => {
  const element = node.nodeType === Node.TEXT_NODE ? node.parentElement : node;
  if (!element || element.nodeType !== Node.ELEMENT_NODE) return false;
  const style = window.getComputedStyle(element);
  if (!style || style.visibility === 'hidden') return false;
  const rect = element.getBoundingClientRect();
  return rect.width > 0 && rect.height > 0;
}
"""

# Result codes are mapped to exceptions on the Python side.
CLICKABLE_POINT = """
(node) => {
  if (!node.isConnected) return { error: 'detached' };
  if (node.nodeType !== Node.ELEMENT_NODE) return { error: 'not-element' };
  const inView = (r) =>
    r.top >= 0 && r.left >= 0 && r.bottom <= window.innerHeight && r.right <= window.innerWidth;
  if (!inView(node.getBoundingClientRect())) {
    node.scrollIntoView({ block: 'center', inline: 'center', behavior: 'instant' });
  }
  for (const rect of node.getClientRects()) {
    if (rect.width * rect.height > 0) {
      return { x: rect.left + rect.width / 2, y: rect.top + rect.height / 2 };
    }
  }
  return { error: 'not-visible' };
}
"""

BOX_MODEL = """
(element) => {
  if (element.nodeType !== Node.ELEMENT_NODE || !element.isConnected) return null;
  if (element.getClientRects().length === 0) return null;
  const rect = element.getBoundingClientRect();
  const style = window.getComputedStyle(element);
  const px = (value) => parseFloat(value) || 0;
  const border = { x: rect.left, y: rect.top, width: rect.width, height: rect.height };
  const margin = {
    x: rect.left - px(style.marginLeft),
    y: rect.top - px(style.marginTop),
    width: rect.width + px(style.marginLeft) + px(style.marginRight),
    height: rect.height + px(style.marginTop) + px(style.marginBottom),
  };
  const padding = {
    x: rect.left + px(style.borderLeftWidth),
    y: rect.top + px(style.borderTopWidth),
    width: rect.width - px(style.borderLeftWidth) - px(style.borderRightWidth),
    height: rect.height - px(style.borderTopWidth) - px(style.borderBottomWidth),
  };
  const content = {
    x: padding.x + px(style.paddingLeft),
    y: padding.y + px(style.paddingTop),
    width: padding.width - px(style.paddingLeft) - px(style.paddingRight),
    height: padding.height - px(style.paddingTop) - px(style.paddingBottom),
  };
  return { content, padding, border, margin, width: rect.width, height: rect.height };
}
"""

# Origin of a frame's viewport inside its parent: border box + border + padding.
FRAME_CONTENT_ORIGIN = """
(frameElement) => {
  const rect = frameElement.getBoundingClientRect();
  const style = window.getComputedStyle(frameElement);
  return {
    x: rect.left + frameElement.clientLeft + (parseFloat(style.paddingLeft) || 0),
    y: rect.top + frameElement.clientTop + (parseFloat(style.paddingTop) || 0),
  };
}
"""

INTERSECTS_VIEWPORT = """
async (element) => {
  const ratio = await new Promise((resolve) => {
    const observer = new IntersectionObserver((entries) => {
      resolve(entries[0].intersectionRatio);
      observer.disconnect();
    });
    observer.observe(element);
  });
  return ratio > 0;
}
"""


def with_elements(expression: str) -> str:
    """
    Wrap `expression(elements, arg)` for evaluation on a scope handle with a
    single `[elements, arg]` argument, the only form Playwright passes through.
    """
    return f"(_scope, [elements, arg]) => ({expression})(elements, arg)"


DESCRIBE_ELEMENT = """
(el) => ({
  tag: el.localName || el.nodeName.toLowerCase(),
  id: el.id || null,
  className: (typeof el.className === 'string' && el.className) || null,
  text: (el.textContent || '').replace(/\\s+/g, ' ').trim().slice(0, 80),
})
"""
