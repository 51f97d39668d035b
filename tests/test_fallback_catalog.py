from devhub.libs.fallback_catalog import CATALOG_SIZE, fallback_projects
from devhub.libs.models import Category


def test_catalog_has_forty_unique_entries():
    projects = fallback_projects()
    assert len(projects) == CATALOG_SIZE == 40
    assert len({p.id for p in projects}) == 40


def test_catalog_is_newest_first():
    dates = [p.created_at for p in fallback_projects()]
    assert dates == sorted(dates, reverse=True)


def test_entries_respect_invariants():
    for project in fallback_projects():
        assert project.category is not Category.ALL
        assert len(project.tags) == len(set(project.tags))
        assert project.image_url.startswith("https://")


def test_highlights_are_featured():
    featured = {p.title for p in fallback_projects() if p.featured}
    assert featured == {"Neon Nexus E-commerce", "Quantum Analytics Grid", "Aura AI Assistant"}


def test_each_call_returns_independent_copies():
    first = fallback_projects()
    first[0].title = "changed"
    assert fallback_projects()[0].title != "changed"
