"""fruitstar — image-built levels with wave-driven units walking a path."""
