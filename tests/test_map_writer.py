from fallback_map import build_fallback_grid
from map_document import MapDocument
from map_writer import MapWriter


def make_document() -> MapDocument:
    grid, _, _ = build_fallback_grid(10, 8)
    return MapDocument.from_grid(grid, "Fallback 8x10 map.")


def test_first_map_is_numbered_one(tmp_path):
    writer = MapWriter(tmp_path / "maps")

    path = writer.write(make_document())

    assert path.name == "map1.txt"
    assert path.read_text(encoding="utf-8") == make_document().to_text()


def test_numbering_continues_after_highest_existing(tmp_path):
    for name in ("map3.txt", "map10.txt", "notes.txt", "map_old.txt", "map7.bak"):
        (tmp_path / name).write_text("x", encoding="utf-8")
    writer = MapWriter(tmp_path)

    assert writer.next_index() == 11
    assert writer.write(make_document()).name == "map11.txt"
    assert writer.next_index() == 12


def test_written_map_parses_back(tmp_path):
    document = make_document()

    path = MapWriter(tmp_path).write(document)

    assert MapDocument.from_text(path.read_text(encoding="utf-8")).rows == document.rows
