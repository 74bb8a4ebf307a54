"""Recommended templates shown in the gallery."""

TEMPLATES = [
    {
        "id": "tpl-1",
        "title": "Cinematic Nature",
        "description": "Stunning aerial shot of mountains with dramatic clouds",
        "prompt": (
            "Sweeping aerial shot over snow-capped mountains, golden hour sunlight, dramatic clouds "
            "rolling through valleys, cinematic camera movement, 4K quality"
        ),
        "mode": "text-to-video",
        "model": "seedance-2.0",
        "settings": {"duration": 10, "quality": "1080p", "aspect_ratio": "16:9", "generate_audio": True},
        "thumbnail": "🏔️",
        "category": "Nature",
    },
    {
        "id": "tpl-2",
        "title": "Product Showcase",
        "description": "Elegant product reveal with studio lighting",
        "prompt": (
            "Luxury product rotating on a reflective surface, soft studio lighting, shallow depth of "
            "field, premium feel, minimalist background, smooth 360-degree rotation"
        ),
        "mode": "text-to-video",
        "model": "seedance-2.0",
        "settings": {"duration": 5, "quality": "1080p", "aspect_ratio": "1:1", "generate_audio": False},
        "thumbnail": "💎",
        "category": "Commercial",
    },
    {
        "id": "tpl-3",
        "title": "Urban Timelapse",
        "description": "City skyline transitioning from day to night",
        "prompt": (
            "City skyline timelapse, day to night transition, lights turning on in buildings, car "
            "light trails on highways, clouds moving fast, dramatic sky colors at sunset"
        ),
        "mode": "text-to-video",
        "model": "seedance-2.0",
        "settings": {"duration": 10, "quality": "1080p", "aspect_ratio": "16:9", "generate_audio": True},
        "thumbnail": "🌆",
        "category": "Urban",
    },
    {
        "id": "tpl-4",
        "title": "Character Animation",
        "description": "Bring a character portrait to life with subtle movement",
        "prompt": (
            "The character slowly turns their head, wind blowing through their hair, subtle smile, "
            "eyes looking at camera, cinematic portrait lighting"
        ),
        "mode": "image-to-video",
        "model": "seedance-2.0",
        "settings": {"duration": 5, "quality": "720p", "aspect_ratio": "9:16", "generate_audio": False},
        "thumbnail": "🎭",
        "category": "Portrait",
    },
    {
        "id": "tpl-5",
        "title": "Food Commercial",
        "description": "Appetizing food shot with steam and close-up details",
        "prompt": (
            "Close-up shot of freshly cooked food, steam rising, warm lighting, ingredients falling "
            "in slow motion, appetizing colors, restaurant commercial quality"
        ),
        "mode": "text-to-video",
        "model": "seedance-2.0",
        "settings": {"duration": 5, "quality": "1080p", "aspect_ratio": "1:1", "generate_audio": True},
        "thumbnail": "🍕",
        "category": "Commercial",
    },
    {
        "id": "tpl-6",
        "title": "Scene Transition",
        "description": "Smooth morphing transition between two scenes",
        "prompt": (
            "Smooth cinematic transition, camera pushing through clouds revealing a new landscape, "
            "seamless morphing effect, dramatic orchestral feeling"
        ),
        "mode": "first-last-frame",
        "model": "seedance-2.0",
        "settings": {"duration": 5, "quality": "720p", "aspect_ratio": "16:9", "generate_audio": True},
        "thumbnail": "🎬",
        "category": "Transition",
    },
]

ALL_CATEGORIES = "All"
STATUS_FILTERS = ("all", "completed", "processing", "failed")
VIEW_MODES = ("grid", "list")
