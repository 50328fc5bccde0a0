from spaserve.cli import main

main()
