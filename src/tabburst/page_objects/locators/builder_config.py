# builder_config.py — Builder.io projects page locators
#
# Selectors are hand-tuned to the Builder.io React / ProseMirror app and will
# drift.  When a run starts failing, update the lists here; the engine code
# does not change.
#
# Candidate format: (strategy, query) or ("role", role, accessible-name regex)
#   strategy: css | text | role | xpath
#
# Key elements:
#   div.tiptap.ProseMirror[contenteditable]   main "What should we build?" editor
#   button[title="Send message"]              send button next to the editor
#   button[title="Select AI model"]           model picker
#   input[placeholder*="branch"]              branch-name field (decoy for prompt)

title = "Builder.io projects"
host = "builder.io"
startUrl = "https://builder.io/app/projects"
fallbackUrl = "https://builder.io/app/projects"

# ── Readiness ────────────────────────────────────────────────────────────────

# Coarse gate: any one of these means the app shell has mounted
ready_checks = [
    '[data-testid="app-shell"], [data-qa="app-shell"]',
    'nav, [role="navigation"]',
    "#root, main, [data-testid], [data-qa]",
]

# Finer gate: the Builder interface is interactive
interface_checks = [
    'input[placeholder*="Ask"], textarea[placeholder*="Ask"], input[placeholder*="Fusion"], textarea[placeholder*="Fusion"]',
    'nav, [role="navigation"], [data-testid="app-shell"]',
    "input, textarea",
]

# ── Prompt input ─────────────────────────────────────────────────────────────

prompt_candidates = [
    ("css", 'div[contenteditable="true"][role="textbox"].tiptap.ProseMirror'),
    ("css", 'div[contenteditable="true"].ProseMirror'),
    ("css", 'textarea[placeholder*="Ask"], input[placeholder*="Ask"]'),
    ("css", 'textarea[placeholder*="Fusion"], input[placeholder*="Fusion"]'),
    ("css", '[data-testid="prompt"], [data-qa="prompt"]'),
    ("role", "textbox", "prompt|ask|build"),
    ("css", 'div[contenteditable="true"][role="textbox"]'),
    ("css", "textarea"),
    ("css", 'input[type="text"]'),
]

send_button = [
    ("css", 'button[type="button"][title="Send message"]'),
    ("css", 'button[aria-label="Send message"]'),
    ("css", 'button[type="submit"]'),
]

# Elements matching a prompt candidate but meant for something else
decoy_patterns = ["branch"]
decoy_attributes = ["placeholder", "aria-label", "name", "id", "data-testid"]

# ── Authentication ───────────────────────────────────────────────────────────

login_indicators = [
    ("css", 'button:has-text("Sign in")'),
    ("css", 'button:has-text("Login")'),
    ("css", 'button:has-text("Log in")'),
    ("css", 'a:has-text("Sign in")'),
    ("css", 'a:has-text("Login")'),
    ("css", 'a:has-text("Log in")'),
    ("css", 'button[type="submit"]:has-text("Sign")'),
    ("css", 'button[type="submit"]:has-text("Login")'),
]

auth_indicators = [
    ("css", 'div[contenteditable="true"][role="textbox"].tiptap.ProseMirror'),
    ("css", 'button[title="Select AI model"]'),
    ("css", 'button:has-text("What should we build?")'),
    ("css", 'input[placeholder*="Ask"]'),
    ("css", 'textarea[placeholder*="Ask"]'),
    ("css", "nav"),
    ("css", '[role="navigation"]'),
    ("css", '[data-testid="app-shell"]'),
    ("css", '[data-testid*="user"]'),
    ("css", '[data-testid*="profile"]'),
    ("css", '[data-testid*="account"]'),
    ("css", 'button[aria-label*="user"]'),
    ("css", 'button[aria-label*="profile"]'),
    ("css", 'button[aria-label*="account"]'),
]

# URL fragments that mean we were bounced to a login page
login_url_markers = ["login", "signin"]

# ── Model picker ─────────────────────────────────────────────────────────────

model_dropdown = [
    ("css", 'button[title="Select AI model"]'),
    ("css", 'button:has-text("Sonnet")'),
    ("css", "button:has(svg.tabler-icon-chevron-down)"),
    ("css", 'button[type="button"]:has(span:has-text("Sonnet"))'),
    ("css", "button:has(span:has(svg))"),
]

model_menu_item = 'li[role="menuitem"]'

# CLI model name → visible menu item text
model_options = {
    "gpt-5-mini": "GPT-5 Mini",
    "gpt-5": "GPT-5",
    "claude-sonnet-4": "Claude Sonnet 4",
    "grok-code-fast": "Grok Code Fast",
    "auto": "Auto",
}
model_fallback = "gpt-5-mini"

# ── Workspace branches ───────────────────────────────────────────────────────

new_branch = [
    ("css", 'button:has-text("New branch")'),
    ("css", 'button[title*="branch" i]'),
    ("role", "button", "new branch|create branch"),
    ("text", "new branch"),
]

branch_name_input = [
    ("css", 'input[placeholder*="branch" i]'),
    ("css", 'input[name*="branch" i]'),
    ("role", "textbox", "branch"),
]

branch_confirm = [
    ("css", 'button:has-text("Create branch")'),
    ("css", 'button:has-text("Create")'),
    ("role", "button", "^create"),
]
