"""Live-reload browser client.

A small ``<script>`` that connects an ``EventSource`` to the push channel
and reloads the page when a ``reload`` event arrives. Injected into HTML
responses by ``HTMLInject`` when ``ServerConfig.live_reload`` is on.
"""

from kida import Environment

from perch.realtime.channel import RELOAD_EVENT

LIVE_RELOAD_TEMPLATE = """\
<script data-perch-live-reload>
(function () {
  if (window.__perchLiveReload || !window.EventSource) return;
  window.__perchLiveReload = true;
  var source = new EventSource("{{ events_path }}");
  source.addEventListener("{{ reload_event }}", function () {
    window.location.reload();
  });
  source.onerror = function () {
    console.debug("[perch] push channel disconnected");
  };
})();
</script>
"""


def render_live_reload_snippet(events_path: str) -> str:
    """Render the live-reload ``<script>`` for the given events endpoint."""
    env = Environment(autoescape=False)
    template = env.from_string(LIVE_RELOAD_TEMPLATE)
    return template.render(
        {
            "events_path": events_path,
            "reload_event": RELOAD_EVENT,
        }
    )
