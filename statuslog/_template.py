"""HTML, CSS and JavaScript for the status page.

Templates use string.Template ``$name`` placeholders. Values substituted
into them must already be HTML-escaped.
"""

from string import Template

CSS_STYLES = """
body {
    font-family: -apple-system, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
    background: #f6f8fa;
    color: #24292f;
    margin: 0;
    padding: 2rem 1rem;
}
main { max-width: 860px; margin: 0 auto; }
h1 { font-size: 1.5rem; margin-bottom: 1.5rem; }
.statusContainer {
    background: #fff;
    border: 1px solid #d0d7de;
    border-radius: 6px;
    padding: 1rem;
    margin-bottom: 1rem;
}
.statusHeader { display: flex; justify-content: space-between; align-items: baseline; }
.statusTitle { font-weight: 600; }
.statusTitle a { color: inherit; text-decoration: none; }
.statusUptime { color: #57606a; font-size: 0.9rem; }
.statusStream { display: flex; gap: 2px; margin-top: 0.75rem; }
.statusSquare { flex: 1; height: 2rem; border-radius: 2px; cursor: pointer; }
.nodata { background: #d0d7de; }
.success { background: #2da44e; }
.failure { background: #cf222e; }
.partial { background: #d4a72c; }
.statusBadge { font-size: 0.85rem; padding: 0.1rem 0.5rem; border-radius: 1rem; color: #fff; }
.statusBadge.nodata { color: #24292f; }
#tooltip {
    position: absolute;
    visibility: hidden;
    opacity: 0;
    transition: opacity 0.15s;
    background: #24292f;
    color: #fff;
    border-radius: 6px;
    padding: 0.5rem 0.75rem;
    max-width: 260px;
    font-size: 0.85rem;
}
.tooltipStatus { display: inline-block; margin-top: 0.25rem; padding: 0 0.4rem; border-radius: 3px; }
.alert { padding: 1rem; border-radius: 6px; background: #ffebe9; border: 1px solid #ff8182; }
.generatedAt { color: #57606a; font-size: 0.8rem; text-align: right; }
"""

# Tooltip hide delay mirrors the square hover handling (milliseconds).
TOOLTIP_HIDE_DELAY_MS = 300

JS_TOOLTIP = Template("""
(function () {
    var tooltip = document.getElementById("tooltip");
    var hideTimer = null;

    function show(square) {
        clearTimeout(hideTimer);
        document.getElementById("tooltipDateTime").textContent = square.dataset.date;
        document.getElementById("tooltipDescription").textContent = square.dataset.description;
        var status = document.getElementById("tooltipStatus");
        status.textContent = square.dataset.label;
        status.className = "tooltipStatus " + square.dataset.status;

        var rect = square.getBoundingClientRect();
        tooltip.style.top = (rect.top + rect.height + window.scrollY + 10) + "px";
        tooltip.style.left = (rect.left + rect.width / 2 - tooltip.offsetWidth / 2) + "px";
        tooltip.style.opacity = "1";
        tooltip.style.visibility = "visible";
    }

    function hide() {
        hideTimer = setTimeout(function () {
            tooltip.style.opacity = "0";
            tooltip.style.visibility = "hidden";
        }, $hide_delay);
    }

    document.querySelectorAll(".statusSquare").forEach(function (square) {
        square.addEventListener("mouseover", function () { show(square); });
        square.addEventListener("mousedown", function () { show(square); });
        square.addEventListener("mouseout", hide);
    });
})();
""").substitute(hide_delay=TOOLTIP_HIDE_DELAY_MS)

PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <style>$css</style>
</head>
<body>
<main>
    <h1>$title</h1>
    <div id="reports">
$reports
    </div>
    <p class="generatedAt">Generated $generated_at</p>
</main>
<div id="tooltip">
    <div id="tooltipDateTime"></div>
    <div id="tooltipDescription"></div>
    <div id="tooltipStatus" class="tooltipStatus"></div>
</div>
<script>$js</script>
</body>
</html>
""")

STATUS_CONTAINER_TEMPLATE = Template("""        <div id="$id" class="statusContainer">
            <div class="statusHeader">
                <span class="statusTitle"><a href="$url">$title</a></span>
                <span class="statusBadge $color">$status</span>
            </div>
            <div class="statusUptime">$uptime uptime over the last $max_days days</div>
$stream
        </div>""")

STATUS_STREAM_TEMPLATE = Template("""            <div id="$id" class="statusStream">
$squares
            </div>""")

STATUS_SQUARE_TEMPLATE = Template(
    """                <div id="$id" class="statusSquare $color" data-status="$color" data-date="$date" """
    """data-label="$label" data-description="$description" title="$tooltip"></div>"""
)

FAILURE_NOTICE_TEMPLATE = Template("""        <div class="alert alert-danger">
            $message
        </div>""")
