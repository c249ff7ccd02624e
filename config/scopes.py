"""Scope tier definitions: expected output shape and classifier keyword sets."""

SCOPE_TABLE_VERSION = "2"

# Each tier: complexity, confidence, expected artifact count, which layers the
# output should contain, the provider token budget and the files the prompt
# asks for. "detected" means the layer is expected only if the request
# mentions persistence.
SCOPES = {
    "single-component": {
        "name": "Single Component",
        "complexity": "simple",
        "confidence": 0.9,
        "expected_files": (3, 5),
        "frontend": True,
        "backend": False,
        "database": False,
        "max_tokens": 8000,
        "file_templates": [
            "src/components/${entity}/${entity}.tsx",
            "src/components/${entity}/${entity}.types.ts",
            "src/components/${entity}/${entity}.mock.ts",
            "src/components/${entity}/index.ts",
        ],
    },
    "feature": {
        "name": "Feature Module",
        "complexity": "high",
        "confidence": 0.8,
        "expected_files": (12, 25),
        "frontend": True,
        "backend": False,
        "database": False,
        "max_tokens": 8000,
        "file_templates": [
            "src/features/${slug}/components/${entity}List.tsx",
            "src/features/${slug}/components/${entity}Card.tsx",
            "src/features/${slug}/components/${entity}Form.tsx",
            "src/features/${slug}/hooks/use${entity}.ts",
            "src/features/${slug}/services/${slug}Service.ts",
            "src/features/${slug}/types/${slug}.types.ts",
            "src/features/${slug}/mocks/${slug}.mock.ts",
            "src/features/${slug}/pages/${entity}Page.tsx",
        ],
    },
    "page": {
        "name": "Page",
        "complexity": "moderate",
        "confidence": 0.85,
        "expected_files": (5, 10),
        "frontend": True,
        "backend": False,
        "database": False,
        "max_tokens": 8000,
        "file_templates": [
            "src/pages/${entity}Page.tsx",
            "src/components/${entity}Header.tsx",
            "src/components/${entity}Content.tsx",
            "src/types/${slug}.types.ts",
            "src/mocks/${slug}.mock.ts",
        ],
    },
    "backend": {
        "name": "Backend Service",
        "complexity": "high",
        "confidence": 0.9,
        "expected_files": (10, 20),
        "frontend": False,
        "backend": True,
        "database": "detected",
        "max_tokens": 8000,
        "file_templates": [
            "src/server.ts",
            "src/app.ts",
            "src/routes/${slug}.routes.ts",
            "src/controllers/${slug}.controller.ts",
            "src/services/${slug}.service.ts",
            "src/models/${slug}.model.ts",
            "src/middleware/error.middleware.ts",
            "src/validators/${slug}.validator.ts",
            "src/config/env.ts",
        ],
    },
    "fullstack": {
        "name": "Full-Stack Application",
        "complexity": "very_high",
        "confidence": 0.95,
        "expected_files": (30, 60),
        "frontend": True,
        "backend": True,
        "database": "detected",
        "max_tokens": 32000,
        "file_templates": [
            "backend/src/server.ts",
            "backend/src/app.ts",
            "backend/src/routes/${slug}.routes.ts",
            "backend/src/controllers/${slug}.controller.ts",
            "backend/src/services/${slug}.service.ts",
            "backend/src/models/${slug}.model.ts",
            "backend/src/middleware/auth.middleware.ts",
            "frontend/src/App.tsx",
            "frontend/src/pages/${entity}Page.tsx",
            "frontend/src/components/${entity}List.tsx",
            "frontend/src/components/${entity}Form.tsx",
            "frontend/src/services/api.ts",
            "frontend/src/types/${slug}.types.ts",
        ],
    },
    "landing-page": {
        "name": "Landing Page",
        "complexity": "moderate",
        "confidence": 0.85,
        "expected_files": (8, 15),
        "frontend": True,
        "backend": False,
        "database": False,
        "max_tokens": 8000,
        "file_templates": [
            "src/pages/LandingPage.tsx",
            "src/components/Hero.tsx",
            "src/components/Features.tsx",
            "src/components/Testimonials.tsx",
            "src/components/Pricing.tsx",
            "src/components/CallToAction.tsx",
            "src/components/Footer.tsx",
            "src/data/content.ts",
        ],
    },
}

# Fallback when no keyword predicate matches.
FALLBACK_SCOPE = {
    "type": "feature",
    "complexity": "moderate",
    "confidence": 0.6,
    "expected_files": (6, 12),
    "keywords": ("default", "fallback"),
}

# Confidence reported when the caller forces a scope.
OVERRIDE_CONFIDENCE = 1.0

# Keyword sets consulted by the classifier. Multi-word entries match with any
# whitespace between words.
SINGLE_COMPONENT_KEYWORDS = [
    "component", "button", "card", "modal", "dialog", "input", "navbar",
    "tooltip", "badge", "avatar", "spinner", "toggle", "dropdown", "select", "widget",
]

# Any of these disqualifies a request from the single-component tier.
SINGLE_COMPONENT_EXCLUSIONS = [
    "application", "app", "system", "api", "fullstack", "full-stack",
    "full stack", "backend", "database", "platform", "website",
]

FULLSTACK_KEYWORDS = [
    "fullstack", "full-stack", "full stack", "end-to-end", "complete application",
    "e-commerce", "ecommerce", "blog system",
]

FRONTEND_KEYWORDS = [
    "frontend", "front-end", "ui", "interface", "react", "client", "web app",
]

BACKEND_KEYWORDS = [
    "backend", "back-end", "api", "server", "express", "endpoint", "endpoints",
    "rest", "microservice",
]

DATABASE_KEYWORDS = [
    "database", "db", "postgres", "postgresql", "mongodb", "mongo", "mysql",
    "prisma", "sql", "sqlite", "persistence",
]

LANDING_PAGE_KEYWORDS = [
    "landing page", "landing", "marketing", "homepage", "home page",
    "hero section", "portfolio", "product page",
]

FEATURE_KEYWORDS = [
    "dashboard", "feature", "admin panel", "management", "crud", "module",
    "workflow", "kanban", "analytics",
]
