import json
from pathlib import Path

import pytest

import main
from outline_sync.conversion import flatten_tree
from outline_sync.hosts import InMemoryHost

from helpers import sample_nodes


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    host = InMemoryHost()
    host.add_page("Inbox", sample_nodes())
    host.to_json_file("tree.json")
    return tmp_path


def test_export_then_apply_to_empty_page(workdir, capsys):
    main.main(["export", "tree.json", "--page", "Inbox", "-o", "doc.json"])
    document = json.loads(Path("doc.json").read_text(encoding="utf-8"))
    assert document["content"] == "A oneBC linkDE"

    empty = InMemoryHost()
    empty.add_page("Inbox")
    empty.to_json_file("empty.json")

    main.main(["apply", "empty.json", "doc.json"])
    assert "Created: 5" in capsys.readouterr().out

    result = InMemoryHost.from_json_file("empty.json")
    assert [(e.text, e.level) for e in flatten_tree(result.get_tree("Inbox").children)] == [
        (e.text, e.level) for e in flatten_tree(sample_nodes())
    ]


def test_flatten(workdir, capsys):
    main.main(["flatten", "tree.json"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "- A **one**  (a)"
    assert lines[2] == "    - C [link](x)  (c)"


def test_apply_with_saved_state(workdir, capsys):
    main.main(["export", "tree.json", "-o", "doc.json"])
    main.main(["apply", "tree.json", "doc.json", "--save-state"])
    assert "Updated: 0  Moved: 0  Created: 0  Deleted: 0" in capsys.readouterr().out

    main.main(["state", "show", "Inbox"])
    assert json.loads(capsys.readouterr().out)["content"] == "A oneBC linkDE"

    main.main(["state", "remove", "Inbox"])
    main.main(["state", "show", "Inbox"])
    assert "No stored state" in capsys.readouterr().out.splitlines()[-1]


def test_unknown_page_exits_with_error(workdir):
    Path("doc.json").write_text('{"content": "", "annotations": []}', encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main.main(["apply", "tree.json", "doc.json", "--page", "Missing"])
    assert exc.value.code == 1
