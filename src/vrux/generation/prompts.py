"""
Prompt Builder
System prompts and variant style directives for component generation.
"""

from dataclasses import dataclass

COMPONENT_SYSTEM_PROMPT = """You are an expert React/Tailwind CSS UI developer. Generate production-ready JSX code that:
1. Uses modern React patterns and hooks
2. Implements Tailwind CSS for styling (no custom CSS)
3. Is fully self-contained and functional
4. Includes proper state management where needed
5. Has excellent UX with hover states, transitions, and responsive design
6. Uses semantic HTML
7. Includes accessibility features (ARIA labels, keyboard navigation)
8. IMPORTANT: Return ONLY the JSX code, no markdown code blocks, no explanations
9. The code should be a complete React component that can be rendered immediately
10. Use React hooks (useState, useEffect, etc.) from 'react' when needed
11. For icons, use Unicode symbols or SVG paths inline
12. Add Framer Motion animations where appropriate (import from 'framer-motion')
13. Use modern UI patterns and micro-interactions
14. Make the component visually stunning and professional
15. NEVER include any script tags or inline JavaScript
16. NEVER use eval, Function constructor, or dynamic code execution
17. NEVER access document.cookie, localStorage, or sensitive browser APIs
18. NEVER include external scripts or resources
19. Always use proper React event handlers (onClick, onChange, etc.)
20. Ensure all user inputs are properly handled and validated"""

STREAM_SYSTEM_PROMPT = """You are an expert React/Tailwind CSS UI developer. Generate production-ready JSX code that:
1. Uses modern React patterns and hooks
2. Implements Tailwind CSS for styling (no custom CSS)
3. Is fully self-contained and functional
4. Includes proper state management where needed
5. Has excellent UX with hover states, transitions, and responsive design
6. Uses semantic HTML
7. Includes accessibility features (ARIA labels, keyboard navigation)
8. IMPORTANT: Return ONLY the component code, no markdown, no explanations
9. The code should be a complete React component
10. DO NOT include any import statements
11. Use React hooks directly as: const [state, setState] = useState()
12. For icons, use Unicode symbols or SVG paths inline
13. For animations, use CSS transitions/transforms only (no external libraries)
14. CRITICAL: Start your code with a function component like: () => { ... return (<Component />) }
15. The component must be an arrow function that returns JSX
16. DO NOT use export statements"""

RETRY_SUFFIX = ". Ensure the component has proper imports, exports, and contains no harmful code."


@dataclass(frozen=True)
class VariantStyle:
    name: str
    directive: str


VARIANT_STYLES = (
    VariantStyle("modern", "Create a modern, minimalist version with subtle animations and clean lines"),
    VariantStyle("bold", "Create a bold, vibrant version with strong visual hierarchy and dynamic colors"),
    VariantStyle(
        "elegant",
        "Create a sophisticated, professional version with refined details and elegant typography",
    ),
)


class PromptBuilder:
    """Builds generation prompts."""

    @staticmethod
    def retry(prompt: str) -> str:
        """Stricter prompt used after generated code fails validation."""
        return f"{prompt}{RETRY_SUFFIX}"

    @staticmethod
    def variant(prompt: str, index: int, variant_count: int) -> str:
        """
        Build the prompt for one variant.

        Args:
            prompt: User prompt
            index: Variant position, 0-based
            variant_count: Variants requested

        Returns:
            The prompt, with the variant's style directive when several
            variants are requested
        """
        if variant_count <= 1:
            return prompt
        return f"{prompt}\n\nStyle directive: {VARIANT_STYLES[index].directive}"

    @staticmethod
    def variant_style(index: int, requested: str | None = None) -> str:
        return requested or VARIANT_STYLES[index].name
