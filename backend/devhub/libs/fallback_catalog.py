"""Fixed local catalog shown when the record store is unreachable or empty."""

from datetime import date
from typing import List

from devhub.libs.models import Category, Project, STORED_CATEGORIES, dedupe_tags

TECHNOLOGIES = [
    "React 19", "TypeScript", "Tailwind CSS", "Next.js 15", "Node.js",
    "GraphQL", "PostgreSQL", "Three.js", "D3.js", "Firebase",
    "Supabase", "Redux Toolkit", "Zustand", "Gemini AI", "Vite",
    "WebSockets", "Radix UI", "Framer Motion", "Prisma", "TRPC",
]

PROJECT_NAMES = [
    "Flux", "Nexus", "Vertex", "Pulse", "Zenith", "Core", "Orbit", "Synergy", "Prism", "Echo",
    "Titan", "Nova", "Stellar", "Quantum", "Atom", "Bio", "Grid", "Frame", "Logic", "Vibe",
    "Shift", "Flow", "Wave", "Spark", "Edge", "Cloud", "Void", "Drift", "Aura", "Sphere",
    "Apex", "Base", "Vista", "Rise", "Link", "Snap", "Zoom", "Bolt", "Iron", "Solid",
]

CATALOG_SIZE = 40


def _image_url(index: int) -> str:
    return (
        f"https://images.unsplash.com/photo-{1550000000000 + index * 987654}"
        "?auto=format&fit=crop&w=1200&q=80"
    )


HIGHLIGHTS = [
    Project(
        id="1",
        title="Neon Nexus E-commerce",
        description=(
            "A next-generation headless commerce engine with dynamic filtering, "
            "persistent cart state and an ultra-low-latency checkout flow."
        ),
        category=Category.ECOMMERCE,
        tags=["Next.js", "TypeScript", "Tailwind CSS", "Stripe"],
        image_url="https://images.unsplash.com/photo-1557821552-17105176677c?auto=format&fit=crop&w=1200&q=80",
        featured=True,
        created_at=date(2024, 11, 15),
        demo_url="#",
        repo_url="#",
    ),
    Project(
        id="2",
        title="Quantum Analytics Grid",
        description=(
            "Advanced financial data visualization suite rendering more than "
            "100k nodes with hardware-accelerated canvas components."
        ),
        category=Category.DASHBOARD,
        tags=["React", "D3.js", "WebWorkers", "Zustand"],
        image_url="https://images.unsplash.com/photo-1551288049-bbda0231f676?auto=format&fit=crop&w=1200&q=80",
        featured=True,
        created_at=date(2024, 12, 10),
        demo_url="#",
        repo_url="#",
    ),
    Project(
        id="3",
        title="Aura AI Assistant",
        description=(
            "Content orchestration platform that uses a large language model to "
            "automate multichannel marketing campaigns."
        ),
        category=Category.AI,
        tags=["Gemini API", "React 19", "Node.js", "Server Sent Events"],
        image_url="https://images.unsplash.com/photo-1677442136019-21780ecad995?auto=format&fit=crop&w=1200&q=80",
        featured=True,
        created_at=date(2025, 1, 1),
        demo_url="#",
        repo_url="#",
    ),
]


def _generated_projects() -> List[Project]:
    projects = []
    for i in range(len(HIGHLIGHTS) + 1, CATALOG_SIZE + 1):
        category = STORED_CATEGORIES[i % len(STORED_CATEGORIES)]
        tech_count = 3 + (i % 3)
        tags = [TECHNOLOGIES[(i + idx * 7) % len(TECHNOLOGIES)] for idx in range(tech_count)]
        name = PROJECT_NAMES[i - 1] if i - 1 < len(PROJECT_NAMES) else f"Module X-{i}"
        projects.append(Project(
            id=str(i),
            title=f"{name} {category.value}",
            description=(
                "High-performance module focused on accessibility (a11y) and SEO "
                "optimization. Part of a consolidated collection of scalable "
                "frontend solutions."
            ),
            category=category,
            tags=dedupe_tags(tags),
            image_url=_image_url(i),
            featured=False,
            created_at=date(2024, 1 + (i % 12), 1 + (i % 28)),
            demo_url="#",
            repo_url="#",
        ))
    return projects


def fallback_projects() -> List[Project]:
    """Return a fresh copy of the fallback catalog, newest first."""
    projects = [p.model_copy(deep=True) for p in HIGHLIGHTS] + _generated_projects()
    return sorted(projects, key=lambda p: p.created_at, reverse=True)
