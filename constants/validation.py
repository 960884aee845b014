"""
Validation Constants

Limits and whitelists applied to user input before it reaches the stores.
"""

# Maximum field lengths
MAX_LENGTHS = {
    'owner': 200,
    'title': 200,
    'ingredient_name': 200,
    'unit': 50,
    'link': 2000,
    'image': 2000,
    'description': 50000,
    'ingredients_text': 50000,
}

# Schemes that are never accepted as a recipe link
DANGEROUS_SCHEMES = {'javascript', 'data', 'vbscript', 'file', 'blob', 'about'}

# Schemes that must carry a hostname to count as well-formed
HOST_REQUIRED_SCHEMES = {'http', 'https', 'ftp'}
