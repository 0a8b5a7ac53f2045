"""
Render a project file set into one self-contained HTML document for an iframe preview.

React projects are transpiled in the browser by CDN-loaded Babel; vanilla
projects are inlined as-is.
"""
from __future__ import annotations

import re
from typing import Mapping, Optional, Sequence

REACT_EXTENSIONS = (".tsx", ".jsx")

_IMPORT_RE = re.compile(r"import.*from.*;")
_EXPORT_DEFAULT_RE = re.compile(r"export default")

_BASE_STYLE = """
        body {
            margin: 0;
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
        }"""

_LOADING_HTML = (
    '<div style="padding: 20px; text-align: center;">'
    "<h1>React App Loading...</h1><p>Setting up your components...</p></div>"
)


def is_react_project(files: Mapping[str, str]) -> bool:
    return any(path.endswith(REACT_EXTENSIONS) for path in files)


def _first_present(files: Mapping[str, str], candidates: Sequence[str], default: str = "") -> str:
    for path in candidates:
        content: Optional[str] = files.get(path)
        if content:
            return content
    return default


def _component_source(content: str) -> str:
    without_imports = _IMPORT_RE.sub("", content)
    return _EXPORT_DEFAULT_RE.sub("const App =", without_imports)


def render_react_preview(files: Mapping[str, str]) -> str:
    css = _first_present(files, ("src/index.css", "src/App.css", "styles.css"))
    components = "\n\n".join(
        _component_source(content)
        for path, content in files.items()
        if path.endswith(REACT_EXTENSIONS)
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>React Preview</title>
    <script src="https://unpkg.com/react@18/umd/react.development.js"></script>
    <script src="https://unpkg.com/react-dom@18/umd/react-dom.development.js"></script>
    <script src="https://unpkg.com/@babel/standalone/babel.min.js"></script>
    <script src="https://cdn.tailwindcss.com"></script>
    <style>{_BASE_STYLE}
        {css}
    </style>
</head>
<body>
    <div id="root"></div>
    <script type="text/babel">
        const {{ useState, useEffect, useCallback }} = React;
        {components}

        const rootElement = document.getElementById('root');
        if (rootElement && typeof App !== 'undefined') {{
            const root = ReactDOM.createRoot(rootElement);
            root.render(React.createElement(App));
        }} else if (rootElement) {{
            rootElement.innerHTML = '{_LOADING_HTML}';
        }}
    </script>
</body>
</html>"""


def render_vanilla_preview(files: Mapping[str, str]) -> str:
    css = _first_present(files, ("styles.css", "style.css", "css"))
    body = _first_present(files, ("index.html", "html"), "<h1>No content available</h1>")
    script = _first_present(files, ("script.js", "main.js", "js"))
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Live Preview</title>
    <script src="https://cdn.tailwindcss.com"></script>
    <style>
        body {{
            margin: 0;
            padding: 20px;
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif;
        }}
        {css}
    </style>
</head>
<body>
    {body}
    <script>
        {script}
    </script>
</body>
</html>"""


def render_preview(files: Mapping[str, str]) -> str:
    """Pick React or vanilla rendering based on the files present."""
    if is_react_project(files):
        return render_react_preview(files)
    return render_vanilla_preview(files)
