"""
Pytest configuration and fixtures for the project generator tests.
"""

import json
import os
import tempfile

import pytest

# Set test environment variables before any projectgen module reads its config
_TEST_DIR = tempfile.mkdtemp(prefix="projectgen_tests_")
os.environ["GENERATED_PROJECTS_DIR"] = os.path.join(_TEST_DIR, "generated_projects")
os.environ["AI_BACKEND_LOG_DIR"] = os.path.join(_TEST_DIR, "logs")
os.environ["PUBLIC_BASE_URL"] = ""
os.environ["NPM_REGISTRY_LOOKUP"] = "0"
os.environ.setdefault("GOOGLE_API_KEY_GEMINI", "test-api-key")


def _manifest(dependencies=None, dev_dependencies=None, **extra):
    doc = {
        "name": "demo-app",
        "version": "0.1.0",
        "dependencies": dependencies if dependencies is not None else {},
        "devDependencies": dev_dependencies if dev_dependencies is not None else {},
    }
    doc.update(extra)
    return json.dumps(doc, indent=2)


@pytest.fixture
def make_manifest():
    return _manifest


@pytest.fixture
def react_vite_files():
    """A complete, consistent Vite + React project."""
    return {
        "package.json": _manifest(
            dependencies={"react": "^18.3.1", "react-dom": "^18.3.1"},
            dev_dependencies={"vite": "^5.4.0", "@vitejs/plugin-react": "^4.3.1"},
        ),
        "vite.config.js": (
            "import { defineConfig } from 'vite'\n"
            "import react from '@vitejs/plugin-react'\n"
            "\n"
            "export default defineConfig({\n"
            "  plugins: [react()],\n"
            "})\n"
        ),
        "index.html": (
            "<!doctype html>\n<html>\n<body>\n<div id=\"root\"></div>\n"
            "<script type=\"module\" src=\"/src/main.jsx\"></script>\n</body>\n</html>\n"
        ),
        "src/main.jsx": (
            "import React from 'react'\n"
            "import ReactDOM from 'react-dom/client'\n"
            "import App from './App.jsx'\n"
            "import './index.css'\n"
            "\n"
            "ReactDOM.createRoot(document.getElementById('root')).render(<App />)\n"
        ),
        "src/App.jsx": (
            "import { useState } from 'react'\n"
            "\n"
            "export default function App() {\n"
            "  const [count, setCount] = useState(0)\n"
            "  return <button onClick={() => setCount(count + 1)}>count is {count}</button>\n"
            "}\n"
        ),
        "src/index.css": "body { margin: 0; }\n",
        ".gitignore": "node_modules\ndist\n",
    }


@pytest.fixture
def model_output(react_vite_files):
    """Raw model text wrapping the consistent project in prose and a code fence."""
    return "Here is your project:\n```json\n" + json.dumps({"files": react_vite_files}) + "\n```\nEnjoy!"


@pytest.fixture
def manual_clock():
    from projectgen.core.artifacts import ManualClock

    return ManualClock(start=1000.0)


@pytest.fixture
def manual_scheduler(manual_clock):
    from projectgen.core.artifacts import ManualScheduler

    return ManualScheduler(manual_clock)


@pytest.fixture
def registry(tmp_path, manual_clock, manual_scheduler):
    from projectgen.core.artifacts import ArtifactRegistry

    return ArtifactRegistry(tmp_path, ttl_seconds=300, clock=manual_clock, scheduler=manual_scheduler)
