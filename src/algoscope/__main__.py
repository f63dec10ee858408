from .algoscope import main

main()
