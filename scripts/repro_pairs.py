import re
import sys
from pathlib import Path

# Ensure we import the repo-local richdiff (not a pip-installed one).
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

import richdiff  # noqa: E402
from richdiff import DiffConfig  # noqa: E402


def classes_in(html):
    return re.findall(r'class="([^"]*diff-[^"]*)"', html)


def main():
    before = (
        '<p><b>INFORMACIÓN CLÍNICA:</b> Paciente de 0 años, género no especificado.</p>'
        '<p><b>HALLAZGOS:</b> Los campos pulmonares... Las estructuras óseas...</p>'
    )
    after = (
        '<p><b>INFORMACIÓN CLÍNICA:</b> Paciente de 50 años, masculino.</p>'
        '<p><b>HALLAZGOS:</b></p>'
        '<ul><li>Los campos pulmonares...</li><li>Las estructuras óseas...</li></ul>'
    )

    result = richdiff.render_diff(before, after, DiffConfig(mark_list_changes=True))
    print("path:", result.path_taken, "error:", result.error)
    print("old classes:", classes_in(result.old_html))
    print("new classes:", classes_in(result.new_html))
    print(result.old_html)
    print(result.new_html)
    print(richdiff.render_inline(before, after))


if __name__ == "__main__":
    main()
