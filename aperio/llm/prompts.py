"""Prompt templates for all text-generation tasks.

Placeholders use ``{name}`` and are filled by ``aperio.templating.build_prompt``;
tokens without a matching variable are left as they are.
"""

SYSTEM_RESEARCH = (
    "You are a financial journalism research assistant. Provide accurate, "
    "timely financial information with proper source attribution."
)

SYSTEM_JOURNALIST = (
    "You are an expert financial journalist and content strategist. Create "
    "engaging, accurate content for AI-powered financial journalism."
)

SEARCH_TEMPLATES = {
    "marketContext": (
        "Latest financial news about {topic} today. Include market impact, "
        "analyst opinions, and key developments from the last 24 hours."
    ),
    "economicData": (
        "Recent news and analysis about {indicator} economic indicator. "
        "Include expert commentary and market implications."
    ),
    "companyNews": (
        "Breaking news and recent developments for {company} ({symbol}). "
        "Include earnings, analyst upgrades/downgrades, and business updates "
        "from the last week."
    ),
    "sectorAnalysis": (
        "Current news and trends in the {sector} sector. Include major company "
        "movements, regulatory changes, and industry analysis."
    ),
    "breakingNews": (
        "Breaking financial news in the last 2 hours about {topic}. Focus on "
        "market-moving events and immediate implications."
    ),
    "weeklyWrap": (
        "Key financial news and market developments from the past week related "
        "to {theme}. Include major economic events and market reactions."
    ),
}

CONTEXT_PROMPTS = {
    "dailyBrief": (
        "Provide context for a 3-minute daily financial brief about {topic}. "
        "Include 3-4 key points that would interest both beginners and "
        "experienced investors."
    ),
    "deepDive": (
        "Provide comprehensive context for a 15-minute deep-dive analysis of "
        "{topic}. Include historical context, expert analysis, and different "
        "perspectives."
    ),
    "marketPulse": (
        "Provide real-time context for a 2-minute market pulse update on "
        "{topic}. Focus on immediate market impact and what investors need to "
        "know right now."
    ),
    "economicLens": (
        "Provide educational context explaining {topic} and its broader "
        "economic implications. Include real-world examples and clear "
        "explanations."
    ),
}

CONTEXT_WRAPPER = """\
{instruction}

AUDIENCE: {audience}
FOCUS: {focus}
RECENT NEWS:
{news}

Respond in EXACTLY this JSON format (no markdown, no extra text):
{"keyPoints": ["point", "point", "point"], "marketImpact": "low|moderate|high", \
"narrative": "one sentence on the suggested narrative", \
"relatedTopics": ["topic", "topic"]}"""

DIALOGUE_PROMPT = """\
Create a natural dialogue for a financial journalism segment titled "{segment}".

CHARACTERS:
{characters}

SEGMENT PURPOSE: {purpose}
TONE: {tone}
TARGET DURATION: {duration}

KEY POINTS TO COVER:
{key_points}

FINANCIAL CONTEXT:
- Market sentiment: {market_sentiment}
- Recent news: {recent_news}
- Economic backdrop: {economic_backdrop}

REQUIREMENTS:
1. Natural conversational flow between characters
2. Each character speaks in their distinct voice and expertise area
3. Include specific data points and numbers when relevant
4. Make complex topics accessible to general audience
5. Maintain NPR Marketplace quality and style
6. Include natural transitions and reactions between speakers
7. Keep dialogue engaging and informative

Format the response as:
CHARACTER: [Dialogue text]
CHARACTER: [Dialogue text]
etc."""

ARTICLE_PROMPT = """\
Write a comprehensive financial journalism article about "{topic}".

ARTICLE SPECIFICATIONS:
- Type: {content_type}
- Target Length: {target_length}
- Tone: {tone}
- Audience Level: {complexity}

REQUIRED STRUCTURE:
{structure}

CONTEXT TO INCORPORATE:
- Recent News: {recent_news}
- Market Data: {market_data}
- Economic Context: {economic_context}

WRITING REQUIREMENTS:
1. Start with a compelling headline that captures the key insight
2. Write in NPR Marketplace style - authoritative yet accessible
3. Include specific data points and numbers where relevant
4. Incorporate quotes and expert perspectives naturally
5. Reference current market conditions and recent developments
6. Include clear section breaks for chart placement
7. End with actionable insights or forward-looking perspective
8. Write for {complexity} level readers

CHART INTEGRATION NOTES:
- Include natural breaks where charts would enhance the story
- Reference data that could be visualized
- Set up chart context with phrases like "as the data shows..." or "the numbers reveal..."

Put the headline on the first line and a one-sentence subheadline on the \
second line. Mark each section with its name from the required structure on \
its own line."""

IMAGE_TEMPLATES = {
    "storyImage": (
        "Create a professional financial journalism illustration showing "
        "{concept}. Style: clean, modern, editorial illustration suitable for "
        "financial news. Colors: blues and grays with accent colors. No text "
        "overlays."
    ),
    "podcastCover": (
        "Design a podcast episode cover for '{title}'. Theme: {theme}. Style: "
        "NPR Marketplace aesthetic, professional financial journalism, minimal "
        "and clean design. Include subtle financial charts or market imagery."
    ),
    "marketTrend": (
        "Visualize {marketData} as an abstract financial illustration. Style: "
        "data visualization meets editorial art, sophisticated color palette, "
        "suitable for financial journalism."
    ),
    "economicConcept": (
        "Create an educational illustration explaining {concept} for {audience}. "
        "Style: infographic-style, clear visual metaphors, professional "
        "financial publication quality."
    ),
    "breakingNews": (
        "Design a breaking news illustration for '{headline}'. Style: {tone}, "
        "financial news aesthetic, bold but not sensational."
    ),
}
