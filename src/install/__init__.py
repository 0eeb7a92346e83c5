"""Installation of neovim releases and source builds."""
