from crpml.cli import main

main()
