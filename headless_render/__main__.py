from headless_render.cli import main

main()
