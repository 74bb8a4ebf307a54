"""Copy for the public marketing pages."""

HERO = {
    "title": "Creating Reality, with Sound.",
    "subtitle": (
        "Turn a sentence or a reference image into a cinematic video with native audio, "
        "powered by Seedance 2.0."
    ),
    "primary_cta": "Start Creating",
    "secondary_cta": "View Pricing",
    "video_url": "/static/hero.mp4",
}

SHOWCASE_ITEMS = [
    {
        "id": "1",
        "thumbnail_url": "/static/showcase/demo-1.jpg",
        "prompt": "A woman walking through a neon-lit Tokyo alley at night, rain reflecting city lights, cinematic mood",
        "aspect_ratio": "portrait",
    },
    {
        "id": "2",
        "thumbnail_url": "/static/showcase/demo-2.jpg",
        "prompt": "Aerial shot of a sailboat cutting through turquoise ocean waves, golden hour lighting",
        "aspect_ratio": "landscape",
    },
    {
        "id": "3",
        "thumbnail_url": "/static/showcase/demo-3.jpg",
        "prompt": "A jazz musician playing saxophone in a smoky underground club, warm amber tones",
        "aspect_ratio": "square",
    },
    {
        "id": "4",
        "thumbnail_url": "/static/showcase/demo-4.jpg",
        "prompt": "Time-lapse of cherry blossoms blooming in a serene Japanese garden, soft piano music",
        "aspect_ratio": "portrait",
    },
    {
        "id": "5",
        "thumbnail_url": "/static/showcase/demo-5.jpg",
        "prompt": "A dancer performing contemporary ballet in an abandoned warehouse, dramatic side lighting",
        "aspect_ratio": "landscape",
    },
    {
        "id": "6",
        "thumbnail_url": "/static/showcase/demo-6.jpg",
        "prompt": "Macro shot of morning dew drops on spider web, nature sounds, shallow depth of field",
        "aspect_ratio": "square",
    },
]

FEATURES = [
    ("Text to Video", "Describe a scene and get a finished shot with camera movement and lighting."),
    ("Image to Video", "Animate a still image while keeping faces, products and style intact."),
    ("Native Audio", "Generate matching ambience, music and effects in the same pass."),
    ("Reference Control", "Guide face, motion, structure and style with up to 12 reference files."),
    ("Up to 1080p", "Export 5 or 10 second clips in 480p, 720p or 1080p."),
    ("Commercial Use", "Every paid plan includes commercial usage rights."),
]

HOW_TO_USE = [
    ("Write a prompt", "Describe the subject, the action and the mood of the shot."),
    ("Add references", "Optionally upload images to pin down characters or style."),
    ("Generate", "Pick duration, quality and audio, then generate and download."),
]

FAQ_ITEMS = [
    (
        "What is SeedanceAI?",
        "SeedanceAI is a web studio for generating short cinematic videos from text prompts and reference images.",
    ),
    (
        "How are credits charged?",
        "A 5 second 720p clip costs 10 credits. Longer clips, 1080p output and generated audio each add 5 credits.",
    ),
    (
        "Do credits expire?",
        "Subscription credits expire 30 days after they are granted. Credit packs never expire.",
    ),
    (
        "What happens if a generation fails?",
        "Credits spent on a failed generation are returned to your balance automatically.",
    ),
    (
        "Can I use the videos commercially?",
        "Yes. Videos generated on any paid plan or with purchased credits can be used commercially.",
    ),
]

PRICING_TITLE = "SeedanceAI Pricing Plans"
PRICING_SUBTITLE = (
    "Generate cinematic AI videos with Seedance 2.0. Choose a subscription or credit pack "
    "to start creating with native audio sync."
)
