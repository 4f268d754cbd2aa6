"""Canned provider responses shared by the tests."""

STRATEGY_RESPONSE = {
    "emotionalTone": "authoritative",
    "formality": "formal",
    "modernity": "traditional",
    "warmth": "cool",
    "styleKeywords": ["classic", "trustworthy"],
    "aestheticDirection": "Classic and dependable",
    "colorMood": "Deep navy with gold accents",
    "colorKeywords": ["navy", "gold"],
    "sectionPriority": ["hero", "services", "about", "contact"],
    "primaryGoal": "contact",
    "trustBuilders": ["credentials", "case results"],
}

PLAN_RESPONSE = {
    "sections": [
        {"key": "hero-1", "type": "hero", "importance": "high", "order": 1},
        {"key": "services-1", "type": "services", "importance": "high", "order": 2},
        {"key": "about-1", "type": "about", "importance": "medium", "order": 3},
        {"key": "contact-1", "type": "contact", "importance": "high", "order": 4},
    ],
    "rationale": "Lead with expertise, close with a consultation.",
}

STYLE_RESPONSE = {
    "primaryColor": "#102A43",
    "secondaryColor": "#243B53",
    "accentColor": "#D4AF37",
    "backgroundColor": "#FFFFFF",
    "textColor": "#102A43",
    "fontHeading": "Merriweather",
    "fontBody": "Lato",
}

LAYOUT_RESPONSE = {
    "pages": [
        {
            "slug": "home",
            "title": "Home",
            "sections": [
                {"key": "hero-1", "variant": "split", "background": "primary", "columns": 2},
                {"key": "services-1", "variant": "cards", "background": "muted", "columns": 3},
                {"key": "contact-1", "variant": "form", "background": "background", "columns": 2},
            ],
        },
        {
            "slug": "about",
            "title": "About Us",
            "sections": [
                {"key": "about-1", "variant": "split", "background": "background", "columns": 2},
            ],
        },
    ],
    "navigation": ["#services-1", "about.html", "#contact-1"],
}

COPY_RESPONSE = {
    "sections": [
        {"sectionKey": "hero-1", "headline": "Defending Springfield Since 1998",
         "subheadline": "Trial-tested counsel", "ctaLabel": "Book a Consultation"},
        {"sectionKey": "services-1", "headline": "Practice Areas",
         "bullets": ["Personal Injury", "Estate Planning"]},
        {"sectionKey": "about-1", "headline": "Our Firm", "paragraph": "Three generations of lawyers."},
        {"sectionKey": "contact-1", "headline": "Talk to a Lawyer Today", "ctaLabel": "Call Now"},
    ]
}

SEO_RESPONSE = {
    "title": "Acme Law | Personal Injury & Estate Planning Lawyers in Springfield",
    "description": (
        "Acme Law represents injured clients and families across Springfield, IL. "
        "Free consultations for personal injury and estate planning matters."
    ),
    "keywords": ["springfield lawyer", "personal injury attorney", "estate planning"],
    "ogTitle": "Acme Law - Springfield Attorneys",
}

# System prompt fragment that identifies each text stage.
STAGE_TRIGGERS = {
    "design strategist": STRATEGY_RESPONSE,
    "section structures": PLAN_RESPONSE,
    "brand designer": STYLE_RESPONSE,
    "layout designer": LAYOUT_RESPONSE,
    "copywriter": COPY_RESPONSE,
    "SEO specialist": SEO_RESPONSE,
}


