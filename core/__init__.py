"""
BookForge markup engine core: repair, LaTeX cleanup and EPUB transpilation.
"""
