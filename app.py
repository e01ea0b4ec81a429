"""BetaEntropy: Gradio web app entry point."""

import logging

import gradio as gr

from betaentropy.ui.analyze_tab import build_analyze_tab

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

with gr.Blocks(title="BetaEntropy") as demo:
    gr.Markdown("# BetaEntropy")
    gr.Markdown(
        "Decision engine for the 7x7 palindrome game: the placer drops the "
        "announced color, the mover slides a token or passes."
    )

    with gr.Tab("Analyze"):
        build_analyze_tab()

if __name__ == "__main__":
    demo.launch(theme=gr.themes.Soft())
