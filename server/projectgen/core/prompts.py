# projectgen/core/prompts.py
"""
Prompt used by the generation pipeline.

Goals:
- Force a single JSON object {"files": {path: content}} the decoder can parse.
- Ask for a complete, installable project: manifest, bundler config, tooling.
- Carry the requester's component library, CMS and project name through.
"""
from typing import Optional


def build_generation_prompt(query: str,
                            component_library: Optional[str] = None,
                            cms: Optional[str] = None,
                            project_name: Optional[str] = None) -> str:
    rules = (
        "You are a code generator AI. Follow EXACT rules:\n"
        "\n"
        "RULES:\n"
        "1. When the user asks for a \"complete project\", always include:\n"
        "   - package.json with name, version, dependencies and devDependencies\n"
        "   - vite.config.js or webpack.config.js\n"
        "   - tsconfig.json (if TypeScript is implied)\n"
        "   - .gitignore\n"
        "   - build and tooling config files\n"
        "   - any other necessary dev files\n"
        "2. Every package you import must be declared in package.json. Bundler plugins go in devDependencies.\n"
        "3. For a Vite project include index.html and src/main.jsx (or .tsx).\n"
        "4. Keep filenames EXACTLY as you output them. Do not rename or modify.\n"
        "5. You may generate code for:\n"
        "   - AEM (HTL, Sling Models, XML config, clientlibs folder)\n"
        "   - Sitecore (CSHTML, rendering files, YAML, serialized items)\n"
        "   - React (jsx, tsx, components, hooks)\n"
        "   - HTML, CSS, JS, SCSS and any config files the project requires\n"
        "6. Output ONLY a JSON object with this format:\n"
        "{\n"
        "  \"files\": {\n"
        "    \"fileName.ext\": \"file content here\",\n"
        "    \"folder/anotherfile.js\": \"content here\"\n"
        "  }\n"
        "}\n"
        "7. IMPORTANT: File content must be raw code only. No backticks. Paths are relative, no leading '/', no '..'.\n"
        "8. If a UI component library is mentioned, ALWAYS incorporate it.\n"
    )

    context = [
        f"The user's component library is: {component_library or 'none provided'}",
        f"The target CMS is: {cms or 'none'}",
    ]
    if project_name:
        context.append(f"Use \"{project_name}\" as the package name.")

    return (
        rules
        + "\n"
        + "\n".join(context)
        + "\n\nUSER QUERY:\n"
        + query.strip()
        + "\n"
    )
